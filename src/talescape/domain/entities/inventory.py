"""Inventory item models."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class ItemType(str, Enum):
    WEAPON = "Weapon"
    ARMOR = "Armor"
    CONSUMABLE = "Consumable"
    KEY_ITEM = "KeyItem"
    TREASURE = "Treasure"


@dataclass(slots=True)
class InventoryItem:
    """A stack of identical items carried by the player."""

    id: str
    name: str
    description: str = ""
    item_type: ItemType = ItemType.KEY_ITEM
    quantity: int = 1
    properties: Dict[str, Any] = field(default_factory=dict)

    def int_property(self, key: str, default: int) -> int:
        value = self.properties.get(key)
        if isinstance(value, bool) or not isinstance(value, int):
            return default
        return value
