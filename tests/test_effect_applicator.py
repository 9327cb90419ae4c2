from talescape.domain.defs import Effect, EffectOperation, EffectType
from talescape.domain.entities import InventoryItem, ItemType
from talescape.services.effect_applicator import apply_all, apply_effect
from talescape.services.events import (
    CustomOccurrence,
    FlagChanged,
    ItemAdded,
    ItemRemoved,
    LevelUp,
    PlayerDied,
    StatChanged,
)
from tests.helpers.stories import build_state


def _potion(quantity: int = 1) -> InventoryItem:
    return InventoryItem(
        id="potion",
        name="Healing Potion",
        item_type=ItemType.CONSUMABLE,
        quantity=quantity,
        properties={"health_restore": 25},
    )


def test_set_flag_reports_old_and_new_value() -> None:
    state = build_state()
    occurrences = apply_effect(Effect.set_flag("met_king"), state)
    assert occurrences == [FlagChanged(flag_name="met_king", old_value=None, new_value=True)]
    assert state.get_flag("met_king") is True


def test_lethal_damage_clamps_health_and_reports_death() -> None:
    state = build_state()
    occurrences = apply_effect(Effect.add_health(-1000), state)
    assert state.player.stats.health == 0
    assert occurrences == [
        StatChanged(stat_name="health", old_value=100, new_value=0),
        PlayerDied(),
    ]
    assert not state.player.is_alive()


def test_healing_is_capped_at_max_health() -> None:
    state = build_state()
    state.player.stats.health = 50
    occurrences = apply_effect(Effect.add_health(500), state)
    assert state.player.stats.health == 100
    assert occurrences == [StatChanged(stat_name="health", old_value=50, new_value=100)]


def test_modify_health_defaults_to_add() -> None:
    state = build_state()
    apply_effect(Effect(EffectType.MODIFY_HEALTH, "health", -30), state)
    assert state.player.stats.health == 70


def test_modify_stat_defaults_to_set_and_clamps_attributes() -> None:
    state = build_state()
    apply_effect(Effect(EffectType.MODIFY_STAT, "strength", 5), state)
    assert state.player.stats.strength == 5
    apply_effect(Effect.modify_stat("strength", 10, EffectOperation.SUBTRACT), state)
    assert state.player.stats.strength == 1
    apply_effect(Effect.modify_stat("charisma", 3, EffectOperation.MULTIPLY), state)
    assert state.player.stats.charisma == 30


def test_experience_gain_levels_up_and_grants_benefits() -> None:
    state = build_state()
    occurrences = apply_effect(Effect.add_experience(100), state)
    stats = state.player.stats
    assert stats.level == 2
    assert stats.max_health == 110
    assert stats.health == 110
    assert (stats.strength, stats.intelligence, stats.charisma) == (11, 11, 11)
    assert occurrences == [
        StatChanged(stat_name="experience", old_value=0, new_value=100),
        LevelUp(old_level=1, new_level=2, experience=100),
    ]


def test_multiple_levels_gained_at_once() -> None:
    state = build_state()
    apply_effect(Effect.add_experience(400), state)
    stats = state.player.stats
    assert stats.level == 3
    assert stats.max_health == 120
    assert stats.strength == 12


def test_unknown_stat_and_non_integer_values_are_skipped() -> None:
    state = build_state()
    before = state.player.stats
    snapshot = (before.health, before.strength, before.level)
    assert apply_effect(Effect(EffectType.MODIFY_STAT, "luck", 5), state) == []
    assert apply_effect(Effect(EffectType.MODIFY_STAT, "level", 5), state) == []
    assert apply_effect(Effect(EffectType.MODIFY_STAT, "strength", "lots"), state) == []
    assert apply_effect(Effect(EffectType.MODIFY_HEALTH, "health", True), state) == []
    after = state.player.stats
    assert (after.health, after.strength, after.level) == snapshot


def test_add_item_merges_existing_stack() -> None:
    state = build_state()
    first = apply_effect(Effect.add_item(_potion(2)), state)
    second = apply_effect(Effect.add_item(_potion(), quantity=3), state)
    assert first == [ItemAdded(item_id="potion", item_name="Healing Potion", quantity=2)]
    assert second == [ItemAdded(item_id="potion", item_name="Healing Potion", quantity=3)]
    assert len(state.player.inventory) == 1
    assert state.player.item_quantity("potion") == 5
    assert state.player.get_item("potion").item_type is ItemType.CONSUMABLE


def test_add_item_falls_back_to_key_for_id_and_name() -> None:
    state = build_state()
    occurrences = apply_effect(Effect(EffectType.ADD_ITEM, "rusty_key", {}), state)
    assert occurrences == [ItemAdded(item_id="rusty_key", item_name="rusty_key", quantity=1)]
    assert state.player.get_item("rusty_key").item_type is ItemType.KEY_ITEM


def test_malformed_add_item_is_ignored() -> None:
    state = build_state()
    assert apply_effect(Effect(EffectType.ADD_ITEM, "item", "not an object"), state) == []
    assert apply_effect(Effect(EffectType.ADD_ITEM, "item", {"name": "No id"}), state) == []
    assert apply_effect(Effect(EffectType.ADD_ITEM, "gem", {"quantity": 0}), state) == []
    assert apply_effect(Effect(EffectType.ADD_ITEM, "gem", {"item_type": "Food"}), state) == []
    assert state.player.inventory == []


def test_removing_missing_item_is_a_silent_no_op() -> None:
    state = build_state()
    assert apply_effect(Effect.remove_item("dragon_egg"), state) == []
    assert state.player.inventory == []


def test_remove_item_partial_and_full_stack() -> None:
    state = build_state()
    state.player.add_item(_potion(3))
    occurrences = apply_effect(Effect.remove_item("potion", 2), state)
    assert occurrences == [ItemRemoved(item_id="potion", item_name="Healing Potion", quantity=2)]
    assert state.player.item_quantity("potion") == 1
    assert apply_effect(Effect.remove_item("potion", 2), state) == []
    assert state.player.item_quantity("potion") == 1
    apply_effect(Effect(EffectType.REMOVE_ITEM, "potion"), state)
    assert not state.player.has_item("potion")
    assert state.player.inventory == []


def test_remove_item_accepts_bare_quantity() -> None:
    state = build_state()
    state.player.add_item(_potion(3))
    apply_effect(Effect(EffectType.REMOVE_ITEM, "potion", 3), state)
    assert state.player.inventory == []


def test_custom_effect_only_reports() -> None:
    state = build_state()
    occurrences = apply_effect(Effect.custom("play_sound", "thunder"), state)
    assert occurrences == [CustomOccurrence(name="play_sound", value="thunder")]
    assert state.flags == {}


def test_apply_all_keeps_declared_order() -> None:
    state = build_state()
    occurrences = apply_all(
        [
            Effect.set_flag("a", 1),
            Effect.remove_item("missing"),
            Effect.subtract_health(10),
            Effect.set_flag("b", 2),
        ],
        state,
    )
    assert [occurrence.event_type for occurrence in occurrences] == [
        "FlagChanged",
        "StatChanged",
        "FlagChanged",
    ]
    assert apply_all(None, state) == []
