"""Player model with stat and inventory rules."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import List

from talescape.core.ids import new_id
from talescape.domain.errors import UnknownStatError
from talescape.domain.leveling import (
    ATTRIBUTE_PER_LEVEL,
    HEALTH_PER_LEVEL,
    StatOperation,
    apply_operation,
    calculate_level,
    experience_required_for_level,
)

from .inventory import InventoryItem, ItemType
from .stats import MODIFIABLE_STAT_NAMES, PlayerStats

_CONSUMABLE_BOOSTS: tuple[tuple[str, str], ...] = (
    ("health_restore", "health"),
    ("strength_boost", "strength"),
    ("intelligence_boost", "intelligence"),
    ("charisma_boost", "charisma"),
)


@dataclass(slots=True)
class StatChange:
    """Outcome of a single stat modification."""

    stat_name: str
    old_value: int
    new_value: int
    old_level: int
    new_level: int

    @property
    def levels_gained(self) -> int:
        return max(0, self.new_level - self.old_level)


@dataclass(slots=True)
class Player:
    """The protagonist of a play session."""

    name: str
    stats: PlayerStats = field(default_factory=PlayerStats)
    inventory: List[InventoryItem] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @classmethod
    def create(cls, name: str, initial_stats: PlayerStats | None = None) -> "Player":
        """Build a player from a stats template without sharing the template."""
        stats = replace(initial_stats) if initial_stats is not None else PlayerStats()
        return cls(name=name, stats=stats)

    def get_stat(self, stat_name: str) -> int:
        return self.stats.get(stat_name)

    def modify_stat(self, stat_name: str, value: int, operation: StatOperation) -> StatChange:
        """Apply ``operation`` to a stat and enforce the clamping rules.

        Raising experience recomputes the level and grants level-up
        benefits for every level gained. Level never goes down.
        """
        if stat_name not in MODIFIABLE_STAT_NAMES:
            raise UnknownStatError(stat_name)
        stats = self.stats
        old_value = getattr(stats, stat_name)
        old_level = stats.level
        new_value = apply_operation(old_value, value, operation)

        if stat_name == "health":
            stats.health = min(max(new_value, 0), stats.max_health)
        elif stat_name == "max_health":
            stats.max_health = max(new_value, 1)
            if stats.health > stats.max_health:
                stats.health = stats.max_health
        elif stat_name == "experience":
            stats.experience = max(new_value, 0)
            new_level = max(calculate_level(stats.experience), old_level)
            if new_level > old_level:
                stats.level = new_level
                self._grant_level_up_benefits(new_level - old_level)
        else:
            setattr(stats, stat_name, max(new_value, 1))

        return StatChange(
            stat_name=stat_name,
            old_value=old_value,
            new_value=getattr(stats, stat_name),
            old_level=old_level,
            new_level=stats.level,
        )

    def _grant_level_up_benefits(self, levels_gained: int) -> None:
        stats = self.stats
        stats.max_health += HEALTH_PER_LEVEL * levels_gained
        stats.health = stats.max_health
        stats.strength += ATTRIBUTE_PER_LEVEL * levels_gained
        stats.intelligence += ATTRIBUTE_PER_LEVEL * levels_gained
        stats.charisma += ATTRIBUTE_PER_LEVEL * levels_gained

    def add_item(self, item: InventoryItem) -> None:
        """Merge ``item`` into an existing stack or append a new one."""
        existing = self.get_item(item.id)
        if existing is not None:
            existing.quantity += item.quantity
            return
        self.inventory.append(replace(item, properties=dict(item.properties)))

    def remove_item(self, item_id: str, quantity: int = 1) -> bool:
        """Remove ``quantity`` units; return False when not enough are held."""
        for index, item in enumerate(self.inventory):
            if item.id != item_id:
                continue
            if item.quantity < quantity:
                return False
            item.quantity -= quantity
            if item.quantity <= 0:
                del self.inventory[index]
            return True
        return False

    def has_item(self, item_id: str, quantity: int = 1) -> bool:
        item = self.get_item(item_id)
        return item is not None and item.quantity >= quantity

    def get_item(self, item_id: str) -> InventoryItem | None:
        for item in self.inventory:
            if item.id == item_id:
                return item
        return None

    def item_quantity(self, item_id: str) -> int:
        item = self.get_item(item_id)
        return item.quantity if item is not None else 0

    def use_consumable(self, item_id: str) -> List[StatChange]:
        """Consume one unit of a consumable and apply its stat properties."""
        item = self.get_item(item_id)
        if item is None:
            raise ValueError(f"Item not found: {item_id}")
        if item.item_type is not ItemType.CONSUMABLE:
            raise ValueError(f"Item is not consumable: {item_id}")
        properties = dict(item.properties)
        self.remove_item(item_id, 1)
        changes: List[StatChange] = []
        for property_name, stat_name in _CONSUMABLE_BOOSTS:
            amount = properties.get(property_name)
            if isinstance(amount, bool) or not isinstance(amount, int):
                continue
            changes.append(self.modify_stat(stat_name, amount, StatOperation.ADD))
        return changes

    def is_alive(self) -> bool:
        return self.stats.health > 0

    @property
    def level(self) -> int:
        return self.stats.level

    def experience_to_next_level(self) -> int:
        return experience_required_for_level(self.stats.level + 1) - self.stats.experience

    def get_inventory_by_type(self, item_type: ItemType) -> List[InventoryItem]:
        return [item for item in self.inventory if item.item_type is item_type]

    def total_inventory_weight(self) -> int:
        return sum(item.int_property("weight", 1) * item.quantity for item in self.inventory)

    def inventory_value(self) -> int:
        return sum(item.int_property("value", 0) * item.quantity for item in self.inventory)
