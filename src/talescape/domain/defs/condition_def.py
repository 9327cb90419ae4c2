"""Condition definitions used to gate choices."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from talescape.core.types import JsonValue


class ConditionType(str, Enum):
    FLAG = "Flag"
    STAT = "Stat"
    INVENTORY = "Inventory"
    SCENE_VISITED = "SceneVisited"
    LEVEL = "Level"
    CUSTOM = "Custom"


class ComparisonOperator(str, Enum):
    EQUALS = "Equals"
    NOT_EQUALS = "NotEquals"
    GREATER_THAN = "GreaterThan"
    LESS_THAN = "LessThan"
    GREATER_EQUAL = "GreaterEqual"
    LESS_EQUAL = "LessEqual"
    HAS = "Has"
    NOT_HAS = "NotHas"
    CONTAINS = "Contains"
    NOT_CONTAINS = "NotContains"


@dataclass(frozen=True, slots=True)
class Condition:
    """Read-only predicate over game state.

    ``key`` is a flag name, stat name, item id or scene id depending on
    ``condition_type``.
    """

    condition_type: ConditionType
    key: str
    operator: ComparisonOperator
    value: JsonValue = None

    @classmethod
    def flag_equals(cls, key: str, value: bool) -> "Condition":
        return cls(ConditionType.FLAG, key, ComparisonOperator.EQUALS, value)

    @classmethod
    def stat_greater_than(cls, key: str, value: int) -> "Condition":
        return cls(ConditionType.STAT, key, ComparisonOperator.GREATER_THAN, value)

    @classmethod
    def stat_greater_equal(cls, key: str, value: int) -> "Condition":
        return cls(ConditionType.STAT, key, ComparisonOperator.GREATER_EQUAL, value)

    @classmethod
    def has_item(cls, item_id: str, quantity: int = 1) -> "Condition":
        return cls(ConditionType.INVENTORY, item_id, ComparisonOperator.GREATER_EQUAL, quantity)

    @classmethod
    def scene_visited(cls, scene_id: str) -> "Condition":
        return cls(ConditionType.SCENE_VISITED, scene_id, ComparisonOperator.EQUALS, True)

    @classmethod
    def level_at_least(cls, level: int) -> "Condition":
        return cls(ConditionType.LEVEL, "level", ComparisonOperator.GREATER_EQUAL, level)

    @classmethod
    def custom(cls, key: str, operator: ComparisonOperator, value: JsonValue) -> "Condition":
        return cls(ConditionType.CUSTOM, key, operator, value)
