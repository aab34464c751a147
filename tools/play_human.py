"""
Human Play Mode
================

Play Basket Catch interactively. One game frame runs per rendered frame.

Controls:
    - Left/Right or A/D: Move basket
    - Mouse: Pointer control (basket follows the cursor)
    - P / ESC: Pause / resume
    - R: Restart
    - Q: Quit
    - Losing window focus pauses automatically; regaining it resumes

When a run ends with a qualifying score the game asks for a name after a
short delay and submits it to the highscore service (or the local cache
when the service is down).

Usage:
    python -m tools.play_human [--seed SEED] [--scale SCALE] [--service-url URL]
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from basket_catch.core.config_loader import GameConfig, load_config
from basket_catch.core.entities import BasketInput, ItemCategory
from basket_catch.core.events import EventKind, GameEvent
from basket_catch.core.game import CoreGame
from basket_catch.core.session import SessionState
from basket_catch.highscores.client import LeaderboardClient
from basket_catch.highscores.leaderboard import LeaderboardEntry


@dataclass
class FloatingText:
    """Short-lived label drifting up from where something happened."""
    text: str
    x: float
    y: float
    color: Tuple[int, int, int]
    born: float
    lifetime: float = 0.8


class CatchRenderer:
    """
    Renderer for human play mode: play field on the left, HUD and
    leaderboard panel on the right.
    """

    def __init__(self, config: GameConfig, scale: float = 1.0):
        self._config = config
        self._scale = scale

        self._field_w = int(config.field.width * scale)
        self._field_h = int(config.field.height * scale)
        self._panel_w = 220
        self.window_size = (self._field_w + self._panel_w, self._field_h)

        # Colors
        self._bg_top = (24, 28, 48)
        self._bg_bottom = (46, 38, 72)
        self._panel = (18, 20, 34)
        self._basket_color = (196, 140, 82)
        self._basket_rim = (238, 190, 120)
        self._text = (235, 235, 245)
        self._text_dim = (150, 150, 170)
        self._heart_on = (255, 80, 110)
        self._heart_off = (70, 70, 90)
        self._immune_color = (120, 200, 255)

        pygame.font.init()
        self._font_huge = pygame.font.Font(None, 64)
        self._font_large = pygame.font.Font(None, 40)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 22)

        self._bg_surface = self._create_gradient_background()

    def _create_gradient_background(self) -> pygame.Surface:
        surface = pygame.Surface((self._field_w, self._field_h))
        for y in range(self._field_h):
            t = y / self._field_h
            color = tuple(
                int(self._bg_top[i] * (1 - t) + self._bg_bottom[i] * t) for i in range(3)
            )
            pygame.draw.line(surface, color, (0, y), (self._field_w, y))
        return surface

    def to_screen(self, x: float, y: float) -> Tuple[int, int]:
        return int(x * self._scale), int(y * self._scale)

    def to_world_x(self, screen_x: int) -> float:
        return screen_x / self._scale

    def in_field(self, screen_x: int) -> bool:
        return 0 <= screen_x < self._field_w

    def render(
        self,
        screen: pygame.Surface,
        render_data: dict,
        texts: List[FloatingText],
        now: float,
        flash: Optional[Tuple[Tuple[int, int, int], float]],
        leaderboard: List[LeaderboardEntry],
        name_entry: Optional[str]
    ) -> None:
        """Render the complete scene."""
        screen.blit(self._bg_surface, (0, 0))

        self._draw_items(screen, render_data)
        self._draw_basket(screen, render_data)
        self._draw_texts(screen, texts, now)
        if flash is not None:
            self._draw_flash(screen, *flash)
        if render_data["immune"]:
            pygame.draw.rect(screen, self._immune_color, (0, 0, self._field_w, self._field_h), 4)

        self._draw_panel(screen, render_data, leaderboard)

        state = render_data["state"]
        if state in (SessionState.PAUSED_USER.value, SessionState.PAUSED_AUTO.value):
            self._draw_paused(screen, state)
        elif render_data["game_over"]:
            self._draw_game_over(screen, render_data["score"], name_entry)

    def _draw_items(self, screen: pygame.Surface, render_data: dict) -> None:
        for item in render_data["items"]:
            cx, cy = self.to_screen(item["x"], item["y"])
            r = max(2, int(item["radius"] * self._scale))
            color = item["color"]
            shape = item["shape"]
            if shape == "circle":
                pygame.draw.circle(screen, color, (cx, cy), r)
                pygame.draw.circle(screen, (255, 255, 255), (cx - r // 3, cy - r // 3), max(1, r // 4))
            elif shape == "square":
                pygame.draw.rect(screen, color, (cx - r, cy - r, 2 * r, 2 * r), border_radius=3)
            elif shape == "triangle":
                pygame.draw.polygon(screen, color, [(cx, cy - r), (cx - r, cy + r), (cx + r, cy + r)])
            else:
                pygame.draw.polygon(screen, color, [(cx, cy - r), (cx + r, cy), (cx, cy + r), (cx - r, cy)])

    def _draw_basket(self, screen: pygame.Surface, render_data: dict) -> None:
        b = render_data["basket"]
        x, y = self.to_screen(b["x"], b["y"])
        w = int(b["width"] * self._scale)
        h = int(b["height"] * self._scale)
        pygame.draw.rect(screen, self._basket_color, (x, y, w, h), border_radius=6)
        pygame.draw.rect(screen, self._basket_rim, (x, y, w, max(3, h // 5)), border_radius=3)

    def _draw_texts(self, screen: pygame.Surface, texts: List[FloatingText], now: float) -> None:
        for t in texts:
            age = now - t.born
            if age < 0 or age > t.lifetime:
                continue
            sx, sy = self.to_screen(t.x, t.y - age * 60)
            label = self._font_medium.render(t.text, True, t.color)
            label.set_alpha(int(255 * (1 - age / t.lifetime)))
            screen.blit(label, label.get_rect(center=(sx, sy)))

    def _draw_flash(self, screen: pygame.Surface, color: Tuple[int, int, int], strength: float) -> None:
        overlay = pygame.Surface((self._field_w, self._field_h), pygame.SRCALPHA)
        overlay.fill((*color, int(110 * strength)))
        screen.blit(overlay, (0, 0))

    def _draw_hearts(self, screen: pygame.Surface, hearts: list, x: int, y: int) -> None:
        for i, healthy in enumerate(hearts):
            color = self._heart_on if healthy else self._heart_off
            cx = x + i * 34 + 12
            pygame.draw.circle(screen, color, (cx - 5, y), 7)
            pygame.draw.circle(screen, color, (cx + 5, y), 7)
            pygame.draw.polygon(screen, color, [(cx - 12, y + 2), (cx + 12, y + 2), (cx, y + 16)])

    def _draw_panel(self, screen: pygame.Surface, render_data: dict, leaderboard: List[LeaderboardEntry]) -> None:
        px = self._field_w
        pygame.draw.rect(screen, self._panel, (px, 0, self._panel_w, self._field_h))

        y = 24
        screen.blit(self._font_small.render("SCORE", True, self._text_dim), (px + 16, y))
        screen.blit(self._font_large.render(str(render_data["score"]), True, self._text), (px + 16, y + 18))

        y += 70
        screen.blit(self._font_small.render("LEVEL", True, self._text_dim), (px + 16, y))
        screen.blit(self._font_large.render(str(render_data["level"]), True, self._text), (px + 16, y + 18))

        y += 70
        self._draw_hearts(screen, render_data["hearts"], px + 16, y + 8)
        if render_data["immune"]:
            screen.blit(self._font_small.render("IMMUNE", True, self._immune_color), (px + 16, y + 30))

        y += 70
        screen.blit(self._font_medium.render("HIGHSCORES", True, self._text), (px + 16, y))
        y += 30
        if not leaderboard:
            screen.blit(self._font_small.render("(none yet)", True, self._text_dim), (px + 16, y))
        for i, entry in enumerate(leaderboard):
            line = f"{i + 1:>2}. {entry.name:<8} {entry.score:>6}"
            screen.blit(self._font_small.render(line, True, self._text), (px + 16, y + i * 22))

        hints = ["Arrows/A-D or mouse: move", "P/ESC: pause   R: restart", "Q: quit"]
        for i, hint in enumerate(hints):
            label = self._font_small.render(hint, True, self._text_dim)
            screen.blit(label, (px + 16, self._field_h - 70 + i * 20))

    def _dim(self, screen: pygame.Surface) -> None:
        overlay = pygame.Surface((self._field_w, self._field_h), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

    def _draw_paused(self, screen: pygame.Surface, state: str) -> None:
        self._dim(screen)
        cx, cy = self._field_w // 2, self._field_h // 2
        title = self._font_huge.render("PAUSED", True, self._text)
        screen.blit(title, title.get_rect(center=(cx, cy - 20)))
        hint = "Press P to resume" if state == SessionState.PAUSED_USER.value else "Focus the window to resume"
        label = self._font_medium.render(hint, True, self._text_dim)
        screen.blit(label, label.get_rect(center=(cx, cy + 30)))

    def _draw_game_over(self, screen: pygame.Surface, score: int, name_entry: Optional[str]) -> None:
        self._dim(screen)
        cx, cy = self._field_w // 2, self._field_h // 2
        title = self._font_huge.render("GAME OVER", True, (255, 100, 100))
        screen.blit(title, title.get_rect(center=(cx, cy - 60)))
        label = self._font_large.render(f"Score: {score}", True, self._text)
        screen.blit(label, label.get_rect(center=(cx, cy)))

        if name_entry is not None:
            prompt = self._font_medium.render("New highscore! Enter your name:", True, self._text)
            screen.blit(prompt, prompt.get_rect(center=(cx, cy + 50)))
            box = pygame.Rect(0, 0, 200, 36)
            box.center = (cx, cy + 90)
            pygame.draw.rect(screen, (40, 44, 70), box, border_radius=4)
            pygame.draw.rect(screen, self._text, box, 2, border_radius=4)
            name = self._font_medium.render(name_entry + "_", True, self._text)
            screen.blit(name, name.get_rect(center=box.center))
        else:
            hint = self._font_medium.render("Press R to play again", True, self._text_dim)
            screen.blit(hint, hint.get_rect(center=(cx, cy + 50)))


class HumanPlayer:
    """Interactive session: input, cosmetic effects and the name prompt."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        scale: float = 1.0,
        service_url: Optional[str] = None
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._fps = config.clock.fps

        self._client = LeaderboardClient.from_config(config.leaderboard, base_url=service_url)
        self._leaderboard: List[LeaderboardEntry] = []
        self._client.load_async(callback=self._on_leaderboard)

        self._game = CoreGame(config=config, seed=seed, highscore_check=self._client.is_highscore)
        self._subscribe(self._game)

        pygame.init()
        self._renderer = CatchRenderer(config, scale)
        self._screen = pygame.display.set_mode(self._renderer.window_size)
        pygame.display.set_caption("Basket Catch")
        self._clock = pygame.time.Clock()

        # State
        self._running = True
        self._pointer = False
        self._texts: List[FloatingText] = []
        self._flash: Optional[Tuple[int, int, int]] = None
        self._flash_until = 0.0
        self._name_entry: Optional[str] = None
        self._submitted = False

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Basket Catch ===")
        print("Arrows/A-D or mouse to move, P/ESC to pause, R to restart, Q to quit")
        print()

        while self._running:
            self._handle_events()
            self._game.tick(self._read_input())
            self._render()
            self._clock.tick(self._fps)

        pygame.quit()
        return self._game.score

    # ------------------------------------------------------------------
    # Cosmetic subscribers
    # ------------------------------------------------------------------

    def _subscribe(self, game: CoreGame) -> None:
        bus = game.events
        bus.subscribe(self._on_score_event, EventKind.CATCH)
        bus.subscribe(self._on_score_event, EventKind.MISS)
        bus.subscribe(self._on_strike, EventKind.STRIKE)
        bus.subscribe(self._on_heal, EventKind.HEAL)
        bus.subscribe(self._on_immune_block, EventKind.IMMUNE_BLOCK)
        bus.subscribe(self._on_level_up, EventKind.LEVEL_UP)
        bus.subscribe(self._on_game_over, EventKind.GAME_OVER)
        bus.subscribe(self._on_highscore_prompt, EventKind.HIGHSCORE_PROMPT)

    def _on_score_event(self, event: GameEvent) -> None:
        delta = event.data.get("score_delta", 0)
        if event.kind == EventKind.CATCH and event.data.get("category") == ItemCategory.HARMFUL.value:
            self._set_flash((110, 110, 120), event.time, 0.25)
        if delta:
            color = (120, 255, 140) if delta > 0 else (255, 110, 110)
            self._texts.append(FloatingText(f"{delta:+d}", event.data["x"], event.data["y"], color, event.time))

    def _on_strike(self, event: GameEvent) -> None:
        self._set_flash((255, 40, 40), event.time, 0.3)

    def _on_heal(self, event: GameEvent) -> None:
        self._set_flash((60, 255, 120), event.time, 0.3)

    def _on_immune_block(self, event: GameEvent) -> None:
        self._texts.append(FloatingText("IMMUNE", event.data["x"], event.data["y"], (120, 200, 255), event.time))

    def _on_level_up(self, event: GameEvent) -> None:
        cx = self._config.field.width / 2
        self._texts.append(FloatingText(
            f"Level {event.data['level']}", cx, self._config.field.height / 3, (255, 230, 120),
            event.time, lifetime=1.5
        ))

    def _on_game_over(self, event: GameEvent) -> None:
        print(f"\nGAME OVER - Score: {event.data['score']} (level {event.data['level']})")

    def _on_highscore_prompt(self, event: GameEvent) -> None:
        self._name_entry = ""
        self._submitted = False
        pygame.key.start_text_input()

    def _on_leaderboard(self, entries: List[LeaderboardEntry]) -> None:
        # Called from the client thread; assignment swaps the list atomically
        self._leaderboard = entries

    def _set_flash(self, color: Tuple[int, int, int], now: float, duration: float) -> None:
        self._flash = color
        self._flash_until = now + duration

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _read_input(self) -> BasketInput:
        keys = pygame.key.get_pressed()
        left = keys[pygame.K_LEFT] or keys[pygame.K_a]
        right = keys[pygame.K_RIGHT] or keys[pygame.K_d]
        if self._name_entry is not None:
            return BasketInput()
        if left or right:
            self._pointer = False
            return BasketInput(left=bool(left), right=bool(right))
        if self._pointer:
            mouse_x, _ = pygame.mouse.get_pos()
            if self._renderer.in_field(mouse_x):
                self._game.move_basket_to(self._renderer.to_world_x(mouse_x))
        return BasketInput()

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type in (pygame.WINDOWFOCUSLOST, pygame.WINDOWMINIMIZED, pygame.WINDOWHIDDEN):
                self._game.focus_lost()
            elif event.type in (pygame.WINDOWFOCUSGAINED, pygame.WINDOWRESTORED, pygame.WINDOWSHOWN):
                self._game.focus_gained()

            elif event.type == pygame.MOUSEMOTION:
                self._pointer = True

            elif event.type == pygame.TEXTINPUT and self._name_entry is not None:
                if len(self._name_entry) < self._config.leaderboard.name_max_length:
                    self._name_entry += event.text

            elif event.type == pygame.KEYDOWN:
                if self._name_entry is not None:
                    self._handle_name_key(event)
                elif event.key in (pygame.K_p, pygame.K_ESCAPE):
                    self._game.toggle_pause()
                elif event.key == pygame.K_r:
                    self._restart()
                elif event.key == pygame.K_q:
                    self._running = False

    def _handle_name_key(self, event) -> None:
        if event.key == pygame.K_RETURN:
            self._submit_name(self._name_entry)
        elif event.key == pygame.K_ESCAPE:
            self._close_name_entry()
        elif event.key == pygame.K_BACKSPACE:
            self._name_entry = self._name_entry[:-1]

    def _submit_name(self, name: str) -> None:
        if self._submitted:
            return
        self._submitted = True
        score = self._game.score
        print(f"Submitting highscore {name or '???'} = {score}")
        self._client.submit_async(name, score, callback=self._on_leaderboard)
        self._close_name_entry()

    def _close_name_entry(self) -> None:
        self._name_entry = None
        pygame.key.stop_text_input()

    def _restart(self) -> None:
        """Restart the game."""
        if self._name_entry is not None:
            self._close_name_entry()
        self._game.reset(seed=self._seed)
        self._texts.clear()
        self._flash = None
        print("\n=== Game Restarted ===\n")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _render(self) -> None:
        now = self._game.now
        self._texts = [t for t in self._texts if now - t.born <= t.lifetime]
        flash = None
        if self._flash is not None and now < self._flash_until:
            flash = (self._flash, max(0.0, min(1.0, (self._flash_until - now) / 0.3)))

        self._renderer.render(
            self._screen,
            self._game.get_render_data(),
            self._texts,
            now,
            flash,
            self._leaderboard,
            self._name_entry
        )
        pygame.display.flip()


def main():
    parser = argparse.ArgumentParser(description="Play Basket Catch interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--scale", type=float, default=1.0, help="Window scale factor (default: 1.0)")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--service-url", type=str, default=None,
                        help="Highscore service URL (default: leaderboard.service_url)")

    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    try:
        config = load_config(args.config)
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            scale=args.scale,
            service_url=args.service_url
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
