"""Evaluates choice-gating conditions against game state."""
from __future__ import annotations

from typing import Callable, Dict, Sequence

from talescape.core.types import JsonValue, as_int, as_str, values_equal
from talescape.domain.defs import ComparisonOperator, Condition, ConditionType
from talescape.domain.entities import STAT_NAMES
from talescape.domain.errors import UnknownStatError
from talescape.domain.state import GameState


def evaluate(conditions: Sequence[Condition] | None, state: GameState) -> bool:
    """Return True only if every condition holds.

    Evaluation stops at the first condition that does not hold. An empty or
    missing list always holds. Raises UnknownStatError for Stat conditions
    naming an unrecognised stat.
    """
    if not conditions:
        return True
    for condition in conditions:
        if not evaluate_one(condition, state):
            return False
    return True


def evaluate_one(condition: Condition, state: GameState) -> bool:
    actual = resolve_actual_value(condition, state)
    return compare_values(actual, condition.operator, condition.value)


def resolve_actual_value(condition: Condition, state: GameState) -> JsonValue:
    """Read the value a condition is compared against from game state."""
    kind = condition.condition_type
    if kind is ConditionType.FLAG:
        return state.get_flag(condition.key)
    if kind is ConditionType.STAT:
        if condition.key not in STAT_NAMES:
            raise UnknownStatError(condition.key)
        return state.player.get_stat(condition.key)
    if kind is ConditionType.INVENTORY:
        return state.player.item_quantity(condition.key)
    if kind is ConditionType.SCENE_VISITED:
        return state.has_visited_scene(condition.key)
    if kind is ConditionType.LEVEL:
        return state.player.stats.level
    # Custom conditions read the flag store and default to False.
    value = state.get_flag(condition.key)
    return False if value is None else value


def _compare_ints(check: Callable[[int, int], bool]) -> Callable[[JsonValue, JsonValue], bool]:
    def compare(actual: JsonValue, expected: JsonValue) -> bool:
        left, right = as_int(actual), as_int(expected)
        if left is None or right is None:
            return False
        return check(left, right)

    return compare


def _contains(actual: JsonValue, expected: JsonValue) -> bool:
    haystack, needle = as_str(actual), as_str(expected)
    if haystack is None or needle is None:
        return False
    return needle in haystack


def _not_contains(actual: JsonValue, expected: JsonValue) -> bool:
    haystack, needle = as_str(actual), as_str(expected)
    if haystack is None or needle is None:
        return True
    return needle not in haystack


_COMPARATORS: Dict[ComparisonOperator, Callable[[JsonValue, JsonValue], bool]] = {
    ComparisonOperator.EQUALS: values_equal,
    ComparisonOperator.NOT_EQUALS: lambda actual, expected: not values_equal(actual, expected),
    ComparisonOperator.GREATER_THAN: _compare_ints(lambda a, e: a > e),
    ComparisonOperator.LESS_THAN: _compare_ints(lambda a, e: a < e),
    ComparisonOperator.GREATER_EQUAL: _compare_ints(lambda a, e: a >= e),
    ComparisonOperator.LESS_EQUAL: _compare_ints(lambda a, e: a <= e),
    ComparisonOperator.HAS: lambda actual, _expected: actual is not None,
    ComparisonOperator.NOT_HAS: lambda actual, _expected: actual is None,
    ComparisonOperator.CONTAINS: _contains,
    ComparisonOperator.NOT_CONTAINS: _not_contains,
}


def compare_values(actual: JsonValue, operator: ComparisonOperator, expected: JsonValue) -> bool:
    """Compare ``actual`` with ``expected``.

    Ordering operators need integers on both sides and yield False
    otherwise; malformed story data reads as "condition not met".
    """
    return _COMPARATORS[operator](actual, expected)
