"""Conversion between domain objects and JSON-compatible payloads.

Decoders validate shape as they go and raise DataValidationError naming
the offending field.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Type, TypeVar

from talescape.domain.defs import (
    Choice,
    ComparisonOperator,
    Condition,
    ConditionType,
    Effect,
    EffectOperation,
    EffectType,
    Scene,
    Story,
)
from talescape.domain.entities import InventoryItem, ItemType, Player, PlayerStats
from talescape.domain.state import GameState

from .errors import DataValidationError

Payload = Dict[str, Any]
E = TypeVar("E", bound=Enum)
_EXCESS_FRACTION = re.compile(r"(\.\d{6})\d+")

_STAT_FIELDS: tuple[str, ...] = (
    "health",
    "max_health",
    "experience",
    "level",
    "strength",
    "intelligence",
    "charisma",
)


def story_to_dict(story: Story) -> Payload:
    return {
        "id": story.id,
        "title": story.title,
        "description": story.description,
        "author": story.author,
        "version": story.version,
        "starting_scene_id": story.starting_scene_id,
        "scenes": [scene_to_dict(scene) for scene in story.scenes],
        "initial_player_stats": stats_to_dict(story.initial_player_stats),
        "metadata": story.metadata,
    }


def story_from_dict(raw: object) -> Story:
    data = _require_mapping(raw, "story")
    scenes_raw = _require_list(data.get("scenes", []), "story.scenes")
    stats_raw = data.get("initial_player_stats")
    return Story(
        id=_require_str(data.get("id"), "story.id"),
        title=_require_str(data.get("title"), "story.title"),
        starting_scene_id=_require_str(data.get("starting_scene_id"), "story.starting_scene_id"),
        scenes=[scene_from_dict(entry, f"story.scenes[{index}]") for index, entry in enumerate(scenes_raw)],
        initial_player_stats=(
            stats_from_dict(stats_raw, "story.initial_player_stats")
            if stats_raw is not None
            else PlayerStats()
        ),
        description=_optional_str(data.get("description"), "story.description") or "",
        author=_optional_str(data.get("author"), "story.author") or "",
        version=_optional_str(data.get("version"), "story.version") or "1.0.0",
        metadata=_optional_mapping(data.get("metadata"), "story.metadata"),
    )


def scene_to_dict(scene: Scene) -> Payload:
    return {
        "id": scene.id,
        "title": scene.title,
        "description": scene.description,
        "choices": [choice_to_dict(choice) for choice in scene.choices],
        "conditions": _conditions_to_list(scene.conditions),
        "effects": _effects_to_list(scene.effects),
        "is_ending": scene.is_ending,
        "background_music": scene.background_music,
        "image": scene.image,
        "metadata": scene.metadata,
    }


def scene_from_dict(raw: object, context: str = "scene") -> Scene:
    data = _require_mapping(raw, context)
    choices_raw = _require_list(data.get("choices", []), f"{context}.choices")
    return Scene(
        id=_require_str(data.get("id"), f"{context}.id"),
        title=_optional_str(data.get("title"), f"{context}.title") or "",
        description=_optional_str(data.get("description"), f"{context}.description") or "",
        choices=[
            choice_from_dict(entry, f"{context}.choices[{index}]")
            for index, entry in enumerate(choices_raw)
        ],
        conditions=_conditions_from_list(data.get("conditions"), f"{context}.conditions"),
        effects=_effects_from_list(data.get("effects"), f"{context}.effects"),
        is_ending=_optional_bool(data.get("is_ending"), f"{context}.is_ending"),
        background_music=_optional_str(data.get("background_music"), f"{context}.background_music"),
        image=_optional_str(data.get("image"), f"{context}.image"),
        metadata=_optional_mapping(data.get("metadata"), f"{context}.metadata"),
    )


def choice_to_dict(choice: Choice) -> Payload:
    return {
        "id": choice.id,
        "text": choice.text,
        "target_scene_id": choice.target_scene_id,
        "conditions": _conditions_to_list(choice.conditions),
        "effects": _effects_to_list(choice.effects),
        "disabled": choice.disabled,
        "disabled_reason": choice.disabled_reason,
        "metadata": choice.metadata,
    }


def choice_from_dict(raw: object, context: str = "choice") -> Choice:
    data = _require_mapping(raw, context)
    return Choice(
        id=_require_str(data.get("id"), f"{context}.id"),
        text=_require_str(data.get("text"), f"{context}.text"),
        target_scene_id=_require_str(data.get("target_scene_id"), f"{context}.target_scene_id"),
        conditions=_conditions_from_list(data.get("conditions"), f"{context}.conditions"),
        effects=_effects_from_list(data.get("effects"), f"{context}.effects"),
        disabled=_optional_bool(data.get("disabled"), f"{context}.disabled"),
        disabled_reason=_optional_str(data.get("disabled_reason"), f"{context}.disabled_reason"),
        metadata=_optional_mapping(data.get("metadata"), f"{context}.metadata"),
    )


def condition_to_dict(condition: Condition) -> Payload:
    return {
        "condition_type": condition.condition_type.value,
        "key": condition.key,
        "operator": condition.operator.value,
        "value": condition.value,
    }


def condition_from_dict(raw: object, context: str = "condition") -> Condition:
    data = _require_mapping(raw, context)
    return Condition(
        condition_type=_require_enum(ConditionType, data.get("condition_type"), f"{context}.condition_type"),
        key=_require_str(data.get("key"), f"{context}.key"),
        operator=_require_enum(ComparisonOperator, data.get("operator"), f"{context}.operator"),
        value=data.get("value"),
    )


def effect_to_dict(effect: Effect) -> Payload:
    return {
        "effect_type": effect.effect_type.value,
        "key": effect.key,
        "value": effect.value,
        "operation": effect.operation.value if effect.operation is not None else None,
    }


def effect_from_dict(raw: object, context: str = "effect") -> Effect:
    data = _require_mapping(raw, context)
    operation_raw = data.get("operation")
    return Effect(
        effect_type=_require_enum(EffectType, data.get("effect_type"), f"{context}.effect_type"),
        key=_require_str(data.get("key"), f"{context}.key"),
        value=data.get("value"),
        operation=(
            _require_enum(EffectOperation, operation_raw, f"{context}.operation")
            if operation_raw is not None
            else None
        ),
    )


def stats_to_dict(stats: PlayerStats) -> Payload:
    return {name: getattr(stats, name) for name in _STAT_FIELDS}


def stats_from_dict(raw: object, context: str = "stats") -> PlayerStats:
    data = _require_mapping(raw, context)
    defaults = PlayerStats()
    values = {
        name: _require_int(data.get(name, getattr(defaults, name)), f"{context}.{name}")
        for name in _STAT_FIELDS
    }
    return PlayerStats(**values)


def item_to_dict(item: InventoryItem) -> Payload:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "item_type": item.item_type.value,
        "quantity": item.quantity,
        "properties": dict(item.properties),
    }


def item_from_dict(raw: object, context: str = "item") -> InventoryItem:
    data = _require_mapping(raw, context)
    return InventoryItem(
        id=_require_str(data.get("id"), f"{context}.id"),
        name=_require_str(data.get("name"), f"{context}.name"),
        description=_optional_str(data.get("description"), f"{context}.description") or "",
        item_type=_require_enum(ItemType, data.get("item_type"), f"{context}.item_type"),
        quantity=_require_int(data.get("quantity"), f"{context}.quantity"),
        properties=dict(_optional_mapping(data.get("properties"), f"{context}.properties") or {}),
    )


def player_to_dict(player: Player) -> Payload:
    return {
        "id": player.id,
        "name": player.name,
        "stats": stats_to_dict(player.stats),
        "inventory": [item_to_dict(item) for item in player.inventory],
    }


def player_from_dict(raw: object, context: str = "player") -> Player:
    data = _require_mapping(raw, context)
    inventory_raw = _require_list(data.get("inventory", []), f"{context}.inventory")
    return Player(
        id=_require_str(data.get("id"), f"{context}.id"),
        name=_require_str(data.get("name"), f"{context}.name"),
        stats=stats_from_dict(data.get("stats"), f"{context}.stats"),
        inventory=[
            item_from_dict(entry, f"{context}.inventory[{index}]")
            for index, entry in enumerate(inventory_raw)
        ],
    )


def game_state_to_dict(state: GameState) -> Payload:
    return {
        "id": state.id,
        "player": player_to_dict(state.player),
        "current_scene_id": state.current_scene_id,
        "story_id": state.story_id,
        "visited_scenes": list(state.visited_scenes),
        "flags": dict(state.flags),
        "game_start_time": state.game_start_time.isoformat(),
        "last_save_time": state.last_save_time.isoformat() if state.last_save_time else None,
        "playtime_seconds": state.playtime_seconds,
    }


def game_state_from_dict(raw: object, context: str = "game_state") -> GameState:
    data = _require_mapping(raw, context)
    visited_raw = _require_list(data.get("visited_scenes", []), f"{context}.visited_scenes")
    last_save_raw = data.get("last_save_time")
    return GameState(
        id=_require_str(data.get("id"), f"{context}.id"),
        player=player_from_dict(data.get("player"), f"{context}.player"),
        current_scene_id=_require_str(data.get("current_scene_id"), f"{context}.current_scene_id"),
        story_id=_require_str(data.get("story_id"), f"{context}.story_id"),
        visited_scenes=[
            _require_str(entry, f"{context}.visited_scenes[{index}]")
            for index, entry in enumerate(visited_raw)
        ],
        flags=dict(_optional_mapping(data.get("flags"), f"{context}.flags") or {}),
        game_start_time=parse_datetime(data.get("game_start_time"), f"{context}.game_start_time"),
        last_save_time=(
            parse_datetime(last_save_raw, f"{context}.last_save_time")
            if last_save_raw is not None
            else None
        ),
        playtime_seconds=_require_int(data.get("playtime_seconds", 0), f"{context}.playtime_seconds"),
    )


def parse_datetime(value: object, context: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are read as UTC.

    A trailing ``Z`` and sub-microsecond digits are accepted.
    """
    text = _require_str(value, context)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _EXCESS_FRACTION.sub(r"\1", text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise DataValidationError(f"{context} must be an ISO-8601 timestamp.") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _conditions_to_list(conditions: List[Condition] | None) -> List[Payload] | None:
    if conditions is None:
        return None
    return [condition_to_dict(condition) for condition in conditions]


def _conditions_from_list(raw: object, context: str) -> List[Condition] | None:
    if raw is None:
        return None
    entries = _require_list(raw, context)
    return [condition_from_dict(entry, f"{context}[{index}]") for index, entry in enumerate(entries)]


def _effects_to_list(effects: List[Effect] | None) -> List[Payload] | None:
    if effects is None:
        return None
    return [effect_to_dict(effect) for effect in effects]


def _effects_from_list(raw: object, context: str) -> List[Effect] | None:
    if raw is None:
        return None
    entries = _require_list(raw, context)
    return [effect_from_dict(entry, f"{context}[{index}]") for index, entry in enumerate(entries)]


def _require_mapping(value: object, context: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise DataValidationError(f"{context} must be an object/dict.")
    return value


def _require_list(value: object, context: str) -> list:
    if not isinstance(value, list):
        raise DataValidationError(f"{context} must be a list.")
    return value


def _require_str(value: object, context: str) -> str:
    if not isinstance(value, str):
        raise DataValidationError(f"{context} must be a string.")
    return value


def _require_int(value: object, context: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DataValidationError(f"{context} must be an integer.")
    return value


def _require_enum(enum_type: Type[E], value: object, context: str) -> E:
    try:
        return enum_type(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_type)
        raise DataValidationError(f"{context} must be one of: {allowed}.") from exc


def _optional_str(value: object, context: str) -> str | None:
    if value is None:
        return None
    return _require_str(value, context)


def _optional_bool(value: object, context: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise DataValidationError(f"{context} must be a boolean if provided.")
    return value


def _optional_mapping(value: object, context: str) -> Dict[str, Any] | None:
    if value is None:
        return None
    return dict(_require_mapping(value, context))
