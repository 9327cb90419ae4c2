"""Runtime entity exports."""

from .inventory import InventoryItem, ItemType
from .player import Player, StatChange
from .stats import MODIFIABLE_STAT_NAMES, STAT_NAMES, PlayerStats

__all__ = [
    "InventoryItem",
    "ItemType",
    "MODIFIABLE_STAT_NAMES",
    "Player",
    "PlayerStats",
    "STAT_NAMES",
    "StatChange",
]
