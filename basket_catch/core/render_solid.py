"""
Solid Renderer
==============

Fast numpy-based renderer that draws items as solid-colour shapes.
Used for `rgb_array` rendering of the Gymnasium environment.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
import numpy as np

from basket_catch.core.config_loader import GameConfig, get_config


class SolidRenderer:
    """
    Renders the play field into an RGB array.

    Features:
    - Items drawn by shape tag (circle, square, triangle, diamond)
    - Basket as a filled rectangle
    - Heart row in the top-left corner
    - Immunity shown as a coloured frame, pause / game over as dimming

    Uses numpy for fast CPU-based rendering without pygame.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize renderer.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config

        self._bg_color = np.array([77, 121, 188], dtype=np.uint8)
        self._basket_color = np.array([255, 165, 0], dtype=np.uint8)
        self._heart_color = np.array([230, 60, 80], dtype=np.uint8)
        self._heart_broken_color = np.array([70, 70, 80], dtype=np.uint8)
        self._immunity_color = np.array([120, 220, 255], dtype=np.uint8)

    def render(
        self,
        render_data: Dict[str, Any],
        width: int,
        height: int
    ) -> np.ndarray:
        """
        Render the game state to an RGB array.

        Args:
            render_data: Data from CoreGame.get_render_data().
            width: Output image width.
            height: Output image height.

        Returns:
            (height, width, 3) uint8 array.
        """
        img = np.zeros((height, width, 3), dtype=np.uint8)
        img[:] = self._bg_color

        sx = width / render_data["field_width"]
        sy = height / render_data["field_height"]

        for item in render_data["items"]:
            cx = int(item["x"] * sx)
            cy = int(item["y"] * sy)
            r = max(1, int(item["radius"] * min(sx, sy)))
            color = np.array(item["color"], dtype=np.uint8)
            self._draw_shape(img, item["shape"], cx, cy, r, color)

        basket = render_data["basket"]
        self._draw_rect(
            img,
            int(basket["x"] * sx),
            int(basket["y"] * sy),
            int(basket["width"] * sx),
            int(basket["height"] * sy),
            self._basket_color
        )

        self._draw_hearts(img, render_data["hearts"])

        if render_data.get("immune"):
            img[:3, :] = self._immunity_color
            img[-3:, :] = self._immunity_color
            img[:, :3] = self._immunity_color
            img[:, -3:] = self._immunity_color

        if render_data.get("state") != "active":
            img[:] = (img * 0.5).astype(np.uint8)

        return img

    def _draw_hearts(self, img: np.ndarray, hearts: list) -> None:
        size = 10
        for i, healthy in enumerate(hearts):
            color = self._heart_color if healthy else self._heart_broken_color
            self._draw_rect(img, 8 + i * (size + 4), 8, size, size, color)

    def _draw_shape(
        self,
        img: np.ndarray,
        shape: str,
        cx: int,
        cy: int,
        r: int,
        color: np.ndarray
    ) -> None:
        if shape == "square":
            self._draw_rect(img, cx - r, cy - r, 2 * r, 2 * r, color)
        elif shape == "triangle":
            self._draw_masked(img, cx, cy, r, color,
                              lambda dx, dy: (dy >= -r) & (dy <= r) & (2 * np.abs(dx) <= dy + r))
        elif shape == "diamond":
            self._draw_masked(img, cx, cy, r, color,
                              lambda dx, dy: np.abs(dx) + np.abs(dy) <= r)
        else:
            self._draw_masked(img, cx, cy, r, color,
                              lambda dx, dy: dx ** 2 + dy ** 2 <= r ** 2)

    def _draw_rect(self, img: np.ndarray, x: int, y: int, w: int, h: int, color: np.ndarray) -> None:
        """Draw a filled axis-aligned rectangle, clipped to the image."""
        height, width = img.shape[:2]
        x0, y0 = max(0, x), max(0, y)
        x1, y1 = min(width, x + w), min(height, y + h)
        if x0 >= x1 or y0 >= y1:
            return
        img[y0:y1, x0:x1] = color

    def _draw_masked(self, img: np.ndarray, cx: int, cy: int, r: int, color: np.ndarray, inside) -> None:
        """Fill pixels of the (2r+1)^2 box around (cx, cy) where inside(dx, dy) holds."""
        height, width = img.shape[:2]

        y_min = max(0, cy - r)
        y_max = min(height, cy + r + 1)
        x_min = max(0, cx - r)
        x_max = min(width, cx + r + 1)

        if y_min >= y_max or x_min >= x_max:
            return

        y_coords = np.arange(y_min, y_max)
        x_coords = np.arange(x_min, x_max)
        yy, xx = np.meshgrid(y_coords, x_coords, indexing='ij')

        mask = inside(xx - cx, yy - cy)
        img[y_min:y_max, x_min:x_max][mask] = color

    def close(self) -> None:
        """Clean up resources (no-op for solid renderer)."""
        pass
