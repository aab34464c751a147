"""
Item Catalog
============

Provides convenient access to item kinds: effect table, spawn weights,
velocity offsets and visual tags, all keyed by category.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from basket_catch.core.config_loader import (
    CategoryEffects,
    EffectConfig,
    GameConfig,
    get_config
)
from basket_catch.core.entities import ItemCategory


# Shape and RGB colour per category (presentation only)
VISUAL_TAGS: Dict[ItemCategory, Tuple[str, Tuple[int, int, int]]] = {
    ItemCategory.BENEFICIAL: ("circle", (255, 210, 74)),
    ItemCategory.HARMFUL: ("square", (154, 160, 166)),
    ItemCategory.EXPLOSIVE: ("triangle", (255, 92, 92)),
    ItemCategory.HEALING: ("diamond", (92, 255, 138)),
}


@dataclass(frozen=True)
class ItemKind:
    """Runtime representation of one item category."""
    category: ItemCategory
    effects: CategoryEffects
    weight: float
    velocity_offset: float
    shape: str
    color: Tuple[int, int, int]

    @property
    def name(self) -> str:
        return self.category.value

    @property
    def on_catch(self) -> EffectConfig:
        return self.effects.catch

    @property
    def on_miss(self) -> EffectConfig:
        return self.effects.miss

    def __repr__(self) -> str:
        return f"ItemKind({self.name})"


class ItemCatalog:
    """
    Collection of all item kinds.

    Exposes the cumulative draw thresholds used by the spawner, in
    declaration order (beneficial 0.6, harmful 0.9, explosive 1.0 by default).
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._kinds: Dict[ItemCategory, ItemKind] = {}
        for category in ItemCategory:
            shape, color = VISUAL_TAGS[category]
            self._kinds[category] = ItemKind(
                category=category,
                effects=config.get_effects(category),
                weight=config.spawn.weights.get(category, 0.0),
                velocity_offset=config.spawn.velocity_offsets.get(category, 0.0),
                shape=shape,
                color=color
            )

        self._thresholds: List[Tuple[float, ItemCategory]] = []
        cumulative = 0.0
        for category, weight in config.spawn.weights.items():
            cumulative += weight
            self._thresholds.append((cumulative, category))

    def __getitem__(self, category: ItemCategory) -> ItemKind:
        return self._kinds[category]

    def __iter__(self) -> Iterator[ItemKind]:
        return iter(self._kinds.values())

    def __len__(self) -> int:
        return len(self._kinds)

    @property
    def thresholds(self) -> List[Tuple[float, ItemCategory]]:
        """Cumulative (threshold, category) pairs for the weighted draw."""
        return list(self._thresholds)

    def category_for_roll(self, roll: float) -> ItemCategory:
        """
        Map a uniform roll in [0, 1) to a category.

        A roll below the first threshold picks the first category, and so on.
        Rolls at or above the final threshold (float rounding) pick the last.
        """
        for threshold, category in self._thresholds:
            if roll < threshold:
                return category
        return self._thresholds[-1][1]


# Module-level singleton
_cached_catalog: Optional[ItemCatalog] = None


def get_catalog(config: Optional[GameConfig] = None) -> ItemCatalog:
    """
    Get the item catalog singleton.

    Args:
        config: Optional config to use. If None, uses cached or default config.

    Returns:
        ItemCatalog instance.
    """
    global _cached_catalog
    if _cached_catalog is None or config is not None:
        _cached_catalog = ItemCatalog(config)
    return _cached_catalog
