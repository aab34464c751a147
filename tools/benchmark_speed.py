"""
Performance Benchmark
=====================

Measures headless frame throughput for performance tuning.

Usage:
    python -m tools.benchmark_speed [--steps S] [--quick]
"""

from __future__ import annotations

import argparse
import sys
import time
import numpy as np

from basket_catch.core.config_loader import load_config
from basket_catch.core.entities import BasketInput
from basket_catch.core.env_gym import CatchEnv
from basket_catch.core.game import CoreGame


_INPUTS = [BasketInput(), BasketInput(left=True), BasketInput(right=True)]


def benchmark_core_game(
    num_steps: int = 1000,
    seed: int = 42
) -> dict:
    """
    Benchmark raw CoreGame frames without Gym overhead.

    Args:
        num_steps: Number of frames.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    game = CoreGame(config=config, seed=seed)
    rng = np.random.default_rng(seed)

    # Warmup
    game.reset(seed=seed)
    for _ in range(10):
        game.tick(_INPUTS[rng.integers(3)])

    # Benchmark
    game.reset(seed=seed)
    start = time.perf_counter()
    resets = 0

    for _ in range(num_steps):
        game.tick(_INPUTS[rng.integers(3)])
        if game.is_over:
            game.reset()
            resets += 1

    elapsed = time.perf_counter() - start

    return {
        "mode": "core_game",
        "num_steps": num_steps,
        "resets": resets,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps,
        "realtime_factor": num_steps / elapsed / config.clock.fps
    }


def benchmark_env(
    num_steps: int = 1000,
    seed: int = 42,
    render: bool = False
) -> dict:
    """
    Benchmark the Gymnasium wrapper.

    Args:
        num_steps: Number of steps.
        seed: Random seed.
        render: Also rasterize an rgb_array frame every step.

    Returns:
        Dict with timing results.
    """
    env = CatchEnv(render_mode="rgb_array" if render else None)
    rng = np.random.default_rng(seed)

    # Warmup
    env.reset(seed=seed)
    for _ in range(10):
        env.step(int(rng.integers(3)))

    # Benchmark
    env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        _, _, terminated, truncated, _ = env.step(int(rng.integers(3)))
        if render:
            env.render()
        if terminated or truncated:
            env.reset()

    elapsed = time.perf_counter() - start
    fps = env.config.clock.fps
    env.close()

    return {
        "mode": "env_render" if render else "env",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps,
        "realtime_factor": num_steps / elapsed / fps
    }


def run_all_benchmarks(steps: int = 5000) -> list:
    """Run comprehensive benchmarks."""
    results = []

    print("=" * 60)
    print("BASKET CATCH PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    print("Benchmarking CoreGame (raw)...")
    results.append(benchmark_core_game(num_steps=steps))

    print("Benchmarking CatchEnv...")
    results.append(benchmark_env(num_steps=steps))

    print("Benchmarking CatchEnv with rgb_array rendering...")
    results.append(benchmark_env(num_steps=max(1, steps // 10), render=True))
    print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Steps/s':>12} {'ms/step':>10} {'x realtime':>12}")
    print("-" * 56)

    for r in results:
        print(f"{r['mode']:<20} {r['steps_per_second']:>12.1f} "
              f"{r['ms_per_step']:>10.3f} {r['realtime_factor']:>12.1f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark Basket Catch frame throughput")
    parser.add_argument("--steps", type=int, default=5000, help="Frames per benchmark")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()

    steps = 500 if args.quick else args.steps

    run_all_benchmarks(steps=steps)

    return 0


if __name__ == "__main__":
    sys.exit(main())
