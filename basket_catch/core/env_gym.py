"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the basket game for headless
play and automated agents. One step is one frame.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from basket_catch.core.config_loader import GameConfig, load_config
from basket_catch.core.entities import BasketInput, ItemCategory
from basket_catch.core.game import CoreGame
from basket_catch.core.state_snapshot import GameSnapshot


# Discrete actions
ACTION_STAY = 0
ACTION_LEFT = 1
ACTION_RIGHT = 2

_ACTION_INPUTS = {
    ACTION_STAY: BasketInput(),
    ACTION_LEFT: BasketInput(left=True),
    ACTION_RIGHT: BasketInput(right=True),
}


class CatchEnv(gym.Env):
    """
    Basket game as a Gymnasium environment.

    Action Space:
        Discrete(3): 0 = stay, 1 = left, 2 = right (held for one frame).

    Observation Space:
        Dict of session counters, basket state, hearts and padded item arrays.

    Reward:
        Score change this frame.

    Termination:
        terminated when strikes reach the maximum; truncated after
        caps.max_frames frames.
    """

    metadata = {
        "render_modes": ["rgb_array"],
        "render_fps": 60,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        render_mode: Optional[str] = None,
        image_width: int = 240,
        image_height: int = 400,
        debug: bool = False,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            render_mode: "rgb_array" for numpy frames, None for headless.
            image_width: Rendered frame width.
            image_height: Rendered frame height.
            debug: If True, prints per-event debug output.
        """
        super().__init__()

        self._config = load_config(config_path)
        self.render_mode = render_mode
        self._img_width = image_width
        self._img_height = image_height
        self._debug = debug

        self._game = CoreGame(config=self._config)
        self._renderer = None

        self.action_space = spaces.Discrete(3)
        self.observation_space = self._build_observation_space()

        if self._debug:
            print(f"[DEBUG] CatchEnv initialized")
            print(f"[DEBUG]   Field: {self._config.field.width}x{self._config.field.height}")
            print(f"[DEBUG]   Max items: {self._config.spawn.max_items}")

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        max_items = self._config.spawn.max_items
        field = self._config.field
        max_strikes = self._config.rules.max_strikes

        return spaces.Dict({
            "score": spaces.Box(low=0, high=np.iinfo(np.int64).max, shape=(), dtype=np.int64),
            "strikes": spaces.Box(low=0, high=max_strikes, shape=(), dtype=np.int32),
            "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32),
            "fall_speed": spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32),
            "immune": spaces.Box(low=0, high=1, shape=(), dtype=np.int8),
            "immunity_remaining": spaces.Box(
                low=0, high=self._config.rules.immunity_seconds, shape=(), dtype=np.float32
            ),
            "basket_x": spaces.Box(low=0, high=field.width, shape=(), dtype=np.float32),
            "basket_vx": spaces.Box(low=-np.inf, high=np.inf, shape=(), dtype=np.float32),
            "hearts": spaces.Box(low=0, high=1, shape=(max_strikes,), dtype=np.int8),
            "items_count": spaces.Box(low=0, high=max_items, shape=(), dtype=np.int32),
            "obj_category": spaces.Box(
                low=-1, high=len(ItemCategory) - 1, shape=(max_items,), dtype=np.int8
            ),
            "obj_x": spaces.Box(low=0, high=field.width, shape=(max_items,), dtype=np.float32),
            "obj_y": spaces.Box(low=-np.inf, high=np.inf, shape=(max_items,), dtype=np.float32),
            "obj_vy": spaces.Box(low=0, high=np.inf, shape=(max_items,), dtype=np.float32),
            "obj_radius": spaces.Box(low=0, high=np.inf, shape=(max_items,), dtype=np.float32),
            "obj_mask": spaces.MultiBinary(max_items),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        snapshot = self._game.reset(seed=seed)
        obs = self._snapshot_to_obs(snapshot)
        info = self._game.get_info()
        info["delta_score"] = 0

        return obs, info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one frame.

        Args:
            action: 0 stay, 1 left, 2 right.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)
        if action not in _ACTION_INPUTS:
            raise ValueError(f"Invalid action {action}, expected 0, 1 or 2")

        result = self._game.tick(_ACTION_INPUTS[action])
        obs = self._snapshot_to_obs(self._game.snapshot())

        terminated = self._game.is_over
        truncated = not terminated and self._game.frames_elapsed >= self._config.caps.max_frames
        reward = float(result.delta_score)

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["caught"] = len(result.caught)
        info["missed"] = len(result.missed)

        if self._debug:
            for outcome in result.outcomes:
                verb = "caught" if outcome.caught else "missed"
                print(f"[DEBUG] Frame {self._game.frames_elapsed}: {verb} "
                      f"{outcome.item.category.value}, score={self._game.score}, "
                      f"strikes={self._game.strikes}")
            if terminated and result.game_over:
                print(f"[DEBUG] TERMINATED: score={self._game.score}, level={self._game.level}")

        return obs, reward, terminated, truncated, info

    def _snapshot_to_obs(self, snapshot: GameSnapshot) -> Dict[str, np.ndarray]:
        """Convert snapshot to observation dict."""
        return snapshot.to_obs_dict()

    def render(self) -> Optional[np.ndarray]:
        """
        Render the current game state.

        Returns:
            RGB array if render_mode is "rgb_array", None otherwise.
        """
        if self.render_mode != "rgb_array":
            return None

        if self._renderer is None:
            from basket_catch.core.render_solid import SolidRenderer
            self._renderer = SolidRenderer(self._config)

        return self._renderer.render(
            self._game.get_render_data(),
            self._img_width,
            self._img_height
        )

    def close(self) -> None:
        """Clean up resources."""
        if self._renderer is not None:
            self._renderer.close()
            self._renderer = None

    @property
    def game(self) -> CoreGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
