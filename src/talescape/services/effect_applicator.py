"""Applies story effects to game state and reports what changed.

Soft-data problems (unknown stats, malformed item payloads, removing items
the player does not hold) never raise; the effect is skipped and the
sequence continues.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Mapping, Sequence

from talescape.core.types import as_int, as_mapping, as_str
from talescape.domain.defs import Effect, EffectOperation, EffectType
from talescape.domain.entities import InventoryItem, ItemType
from talescape.domain.errors import UnknownStatError
from talescape.domain.leveling import StatOperation
from talescape.domain.state import GameState

from .events import (
    CustomOccurrence,
    FlagChanged,
    ItemAdded,
    ItemRemoved,
    LevelUp,
    Occurrence,
    PlayerDied,
    StatChanged,
)

logger = logging.getLogger(__name__)


def apply_all(effects: Sequence[Effect] | None, state: GameState) -> List[Occurrence]:
    """Apply ``effects`` strictly in order and collect their occurrences."""
    occurrences: List[Occurrence] = []
    for effect in effects or ():
        occurrences.extend(apply_effect(effect, state))
    return occurrences


def apply_effect(effect: Effect, state: GameState) -> List[Occurrence]:
    handler = _HANDLERS[effect.effect_type]
    return handler(effect, state)


def _apply_set_flag(effect: Effect, state: GameState) -> List[Occurrence]:
    old_value = state.get_flag(effect.key)
    state.set_flag(effect.key, effect.value)
    logger.debug("Set flag '%s' to %r (was: %r)", effect.key, effect.value, old_value)
    return [FlagChanged(flag_name=effect.key, old_value=old_value, new_value=effect.value)]


def _apply_modify_stat(effect: Effect, state: GameState) -> List[Occurrence]:
    operation = effect.operation or EffectOperation.SET
    return _modify_stat(state, effect.key, effect, operation)


def _apply_modify_health(effect: Effect, state: GameState) -> List[Occurrence]:
    operation = effect.operation or EffectOperation.ADD
    return _modify_stat(state, "health", effect, operation)


def _modify_stat(
    state: GameState, stat_name: str, effect: Effect, operation: EffectOperation
) -> List[Occurrence]:
    amount = as_int(effect.value)
    if amount is None:
        logger.warning(
            "Ignoring %s on '%s': value %r is not an integer",
            effect.effect_type.value,
            stat_name,
            effect.value,
        )
        return []
    try:
        change = state.player.modify_stat(stat_name, amount, StatOperation(operation.value))
    except UnknownStatError:
        # Unknown stats read as 0 and are left untouched.
        logger.warning("Ignoring %s on unknown stat '%s'", effect.effect_type.value, stat_name)
        return []

    occurrences: List[Occurrence] = [
        StatChanged(stat_name=stat_name, old_value=change.old_value, new_value=change.new_value)
    ]
    if change.levels_gained:
        occurrences.append(
            LevelUp(
                old_level=change.old_level,
                new_level=change.new_level,
                experience=state.player.stats.experience,
            )
        )
    if stat_name == "health" and change.new_value <= 0:
        occurrences.append(PlayerDied())
    return occurrences


def _apply_add_item(effect: Effect, state: GameState) -> List[Occurrence]:
    item = _parse_item_payload(effect)
    if item is None:
        return []
    state.player.add_item(item)
    logger.debug("Added item '%s' (%d)", item.name, item.quantity)
    return [ItemAdded(item_id=item.id, item_name=item.name, quantity=item.quantity)]


def _parse_item_payload(effect: Effect) -> InventoryItem | None:
    payload = as_mapping(effect.value)
    if payload is None:
        logger.warning("Ignoring AddItem '%s': value is not an object", effect.key)
        return None
    item_id = as_str(payload.get("id")) or (effect.key if effect.key != "item" else None)
    if not item_id:
        logger.warning("Ignoring AddItem '%s': item id missing", effect.key)
        return None
    quantity = as_int(payload.get("quantity", 1))
    if quantity is None or quantity <= 0:
        logger.warning("Ignoring AddItem '%s': invalid quantity %r", item_id, payload.get("quantity"))
        return None
    raw_type = payload.get("item_type", ItemType.KEY_ITEM.value)
    try:
        item_type = ItemType(raw_type)
    except ValueError:
        logger.warning("Ignoring AddItem '%s': unknown item type %r", item_id, raw_type)
        return None
    properties = as_mapping(payload.get("properties")) or {}
    return InventoryItem(
        id=item_id,
        name=as_str(payload.get("name")) or item_id,
        description=as_str(payload.get("description")) or "",
        item_type=item_type,
        quantity=quantity,
        properties=dict(properties),
    )


def _apply_remove_item(effect: Effect, state: GameState) -> List[Occurrence]:
    item_id, quantity = _parse_removal(effect)
    if item_id is None or quantity is None or quantity <= 0:
        logger.warning("Ignoring RemoveItem '%s': malformed value %r", effect.key, effect.value)
        return []
    held = state.player.get_item(item_id)
    item_name = held.name if held is not None else item_id
    if not state.player.remove_item(item_id, quantity):
        # Missing or insufficient items are tolerated without an occurrence.
        return []
    logger.debug("Removed item '%s' (%d)", item_name, quantity)
    return [ItemRemoved(item_id=item_id, item_name=item_name, quantity=quantity)]


def _parse_removal(effect: Effect) -> tuple[str | None, int | None]:
    payload: Mapping[str, object] | None = as_mapping(effect.value)
    if payload is not None:
        item_id = as_str(payload.get("id")) or effect.key
        return item_id, as_int(payload.get("quantity", 1))
    if effect.value is None:
        return effect.key, 1
    return effect.key, as_int(effect.value)


def _apply_custom(effect: Effect, state: GameState) -> List[Occurrence]:
    logger.debug("Applied custom effect: %s -> %r", effect.key, effect.value)
    return [CustomOccurrence(name=effect.key, value=effect.value)]


_HANDLERS: Dict[EffectType, Callable[[Effect, GameState], List[Occurrence]]] = {
    EffectType.SET_FLAG: _apply_set_flag,
    EffectType.MODIFY_STAT: _apply_modify_stat,
    EffectType.ADD_ITEM: _apply_add_item,
    EffectType.REMOVE_ITEM: _apply_remove_item,
    EffectType.MODIFY_HEALTH: _apply_modify_health,
    EffectType.CUSTOM: _apply_custom,
}
