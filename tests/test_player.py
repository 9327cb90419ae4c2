import pytest

from talescape.domain.entities import InventoryItem, ItemType, Player, PlayerStats
from talescape.domain.errors import UnknownStatError
from talescape.domain.leveling import (
    StatOperation,
    calculate_level,
    experience_required_for_level,
)


def test_level_curve() -> None:
    assert calculate_level(-50) == 1
    assert calculate_level(0) == 1
    assert calculate_level(99) == 1
    assert calculate_level(100) == 2
    assert calculate_level(399) == 2
    assert calculate_level(400) == 3
    assert calculate_level(900) == 4
    assert experience_required_for_level(1) == 0
    assert experience_required_for_level(4) == 900


def test_create_copies_template() -> None:
    template = PlayerStats(strength=14)
    player = Player.create("Ayla", template)
    player.stats.strength = 1
    assert template.strength == 14
    assert Player.create("Ayla").stats == PlayerStats()


def test_get_stat_rejects_unknown_names() -> None:
    player = Player.create("Ayla")
    assert player.get_stat("level") == 1
    with pytest.raises(UnknownStatError, match="Unknown stat: luck"):
        player.get_stat("luck")
    with pytest.raises(UnknownStatError):
        player.modify_stat("level", 5, StatOperation.SET)


def test_lowering_max_health_pulls_health_down() -> None:
    player = Player.create("Ayla")
    change = player.modify_stat("max_health", 40, StatOperation.SET)
    assert player.stats.max_health == 40
    assert player.stats.health == 40
    assert change.old_value == 100 and change.new_value == 40
    player.modify_stat("max_health", -10, StatOperation.SET)
    assert player.stats.max_health == 1
    assert player.stats.health == 1


def test_experience_never_negative_and_level_never_drops() -> None:
    player = Player.create("Ayla")
    player.modify_stat("experience", 500, StatOperation.SET)
    assert player.level == 3
    change = player.modify_stat("experience", 1000, StatOperation.SUBTRACT)
    assert player.stats.experience == 0
    assert player.level == 3
    assert change.levels_gained == 0
    assert player.experience_to_next_level() == 900


def test_inventory_merge_and_remove() -> None:
    player = Player.create("Ayla")
    sword = InventoryItem(id="sword", name="Sword", item_type=ItemType.WEAPON)
    player.add_item(sword)
    player.add_item(InventoryItem(id="sword", name="Sword", item_type=ItemType.WEAPON, quantity=2))
    assert player.item_quantity("sword") == 3
    assert sword.quantity == 1
    assert not player.remove_item("sword", 4)
    assert player.remove_item("sword", 3)
    assert player.inventory == []
    assert not player.remove_item("shield")


def test_use_consumable_applies_properties() -> None:
    player = Player.create("Ayla")
    player.stats.health = 50
    player.add_item(
        InventoryItem(
            id="tonic",
            name="Tonic",
            item_type=ItemType.CONSUMABLE,
            properties={"health_restore": 30, "strength_boost": 2},
        )
    )
    changes = player.use_consumable("tonic")
    assert [change.stat_name for change in changes] == ["health", "strength"]
    assert player.stats.health == 80
    assert player.stats.strength == 12
    assert not player.has_item("tonic")


def test_use_consumable_rejects_other_items() -> None:
    player = Player.create("Ayla")
    player.add_item(InventoryItem(id="key", name="Key"))
    with pytest.raises(ValueError):
        player.use_consumable("key")
    with pytest.raises(ValueError):
        player.use_consumable("missing")


def test_inventory_summaries() -> None:
    player = Player.create("Ayla")
    player.add_item(
        InventoryItem(
            id="gold",
            name="Gold Bar",
            item_type=ItemType.TREASURE,
            quantity=2,
            properties={"value": 100, "weight": 5},
        )
    )
    player.add_item(InventoryItem(id="note", name="Note"))
    assert player.inventory_value() == 200
    assert player.total_inventory_weight() == 11
    assert [item.id for item in player.get_inventory_by_type(ItemType.TREASURE)] == ["gold"]
