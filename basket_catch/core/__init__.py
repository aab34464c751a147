"""
Basket Catch Core - the real-time game loop.

This module provides the frame-driven game simulation, its Gymnasium
wrapper, and all supporting systems (clock, spawner, difficulty, scoring,
session state).

Main exports:
- CoreGame: One play session, advanced frame by frame
- CatchEnv: Gymnasium environment for headless play and agents
- GameConfig: Configuration loaded from game_config.yaml
- EventBus / EventKind / GameEvent: observer interface for cosmetic effects
"""

from basket_catch.core.config_loader import GameConfig, load_config
from basket_catch.core.entities import Basket, BasketInput, Item, ItemCategory
from basket_catch.core.events import EventBus, EventKind, EventLog, GameEvent
from basket_catch.core.game import CoreGame
from basket_catch.core.session import SessionState
from basket_catch.core.env_gym import CatchEnv

__all__ = [
    "GameConfig",
    "load_config",
    "Basket",
    "BasketInput",
    "Item",
    "ItemCategory",
    "EventBus",
    "EventKind",
    "EventLog",
    "GameEvent",
    "CoreGame",
    "SessionState",
    "CatchEnv",
]
