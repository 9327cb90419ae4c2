"""Experience curve and stat arithmetic."""
from __future__ import annotations

import math
from enum import Enum


class StatOperation(str, Enum):
    """Arithmetic applied when a stat is modified."""

    SET = "Set"
    ADD = "Add"
    SUBTRACT = "Subtract"
    MULTIPLY = "Multiply"


HEALTH_PER_LEVEL = 10
ATTRIBUTE_PER_LEVEL = 1


def calculate_level(experience: int) -> int:
    """Return the level reached with the given experience.

    level = floor(sqrt(experience / 100)) + 1, with negative experience
    treated as zero.
    """
    if experience <= 0:
        return 1
    return math.isqrt(experience // 100) + 1


def experience_required_for_level(level: int) -> int:
    """Inverse of calculate_level: the minimum experience for ``level``."""
    if level <= 1:
        return 0
    return (level - 1) ** 2 * 100


def apply_operation(current: int, value: int, operation: StatOperation) -> int:
    if operation is StatOperation.SET:
        return value
    if operation is StatOperation.ADD:
        return current + value
    if operation is StatOperation.SUBTRACT:
        return current - value
    return current * value
