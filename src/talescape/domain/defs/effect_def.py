"""Effect definitions applied on choices and scene entry."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from talescape.core.types import JsonValue
from talescape.domain.entities import InventoryItem


class EffectType(str, Enum):
    SET_FLAG = "SetFlag"
    MODIFY_STAT = "ModifyStat"
    ADD_ITEM = "AddItem"
    REMOVE_ITEM = "RemoveItem"
    MODIFY_HEALTH = "ModifyHealth"
    CUSTOM = "Custom"


class EffectOperation(str, Enum):
    SET = "Set"
    ADD = "Add"
    SUBTRACT = "Subtract"
    MULTIPLY = "Multiply"


@dataclass(frozen=True, slots=True)
class Effect:
    """A single state mutation.

    ``operation`` is optional; ModifyStat defaults to Set and ModifyHealth
    defaults to Add.
    """

    effect_type: EffectType
    key: str
    value: JsonValue = None
    operation: EffectOperation | None = None

    @classmethod
    def set_flag(cls, key: str, value: JsonValue = True) -> "Effect":
        return cls(EffectType.SET_FLAG, key, value)

    @classmethod
    def modify_stat(cls, key: str, value: int, operation: EffectOperation) -> "Effect":
        return cls(EffectType.MODIFY_STAT, key, value, operation)

    @classmethod
    def add_health(cls, value: int) -> "Effect":
        return cls(EffectType.MODIFY_HEALTH, "health", value, EffectOperation.ADD)

    @classmethod
    def subtract_health(cls, value: int) -> "Effect":
        return cls(EffectType.MODIFY_HEALTH, "health", value, EffectOperation.SUBTRACT)

    @classmethod
    def add_experience(cls, value: int) -> "Effect":
        return cls.modify_stat("experience", value, EffectOperation.ADD)

    @classmethod
    def add_item(cls, item: InventoryItem, quantity: int | None = None) -> "Effect":
        payload = {
            "id": item.id,
            "name": item.name,
            "description": item.description,
            "item_type": item.item_type.value,
            "quantity": item.quantity if quantity is None else quantity,
            "properties": dict(item.properties),
        }
        return cls(EffectType.ADD_ITEM, "item", payload)

    @classmethod
    def remove_item(cls, item_id: str, quantity: int = 1) -> "Effect":
        return cls(EffectType.REMOVE_ITEM, item_id, {"id": item_id, "quantity": quantity})

    @classmethod
    def custom(
        cls, key: str, value: JsonValue, operation: EffectOperation | None = None
    ) -> "Effect":
        return cls(EffectType.CUSTOM, key, value, operation)
