"""Player stat model."""
from __future__ import annotations

from dataclasses import dataclass

from talescape.domain.errors import UnknownStatError

STAT_NAMES: tuple[str, ...] = (
    "health",
    "max_health",
    "experience",
    "level",
    "strength",
    "intelligence",
    "charisma",
)

# Level is derived from experience and cannot be modified directly.
MODIFIABLE_STAT_NAMES: tuple[str, ...] = tuple(name for name in STAT_NAMES if name != "level")


@dataclass(slots=True)
class PlayerStats:
    """Integer stats tracked for the player."""

    health: int = 100
    max_health: int = 100
    experience: int = 0
    level: int = 1
    strength: int = 10
    intelligence: int = 10
    charisma: int = 10

    def get(self, stat_name: str) -> int:
        if stat_name not in STAT_NAMES:
            raise UnknownStatError(stat_name)
        return getattr(self, stat_name)

    def invariant_violations(self) -> list[str]:
        """Describe every way these stats break the player invariant."""
        problems: list[str] = []
        if self.max_health < 1:
            problems.append(f"max_health must be at least 1 (got {self.max_health})")
        if not 0 <= self.health <= max(self.max_health, 1):
            problems.append(
                f"health must be between 0 and max_health (got {self.health}/{self.max_health})"
            )
        for name in ("strength", "intelligence", "charisma"):
            value = getattr(self, name)
            if value < 1:
                problems.append(f"{name} must be at least 1 (got {value})")
        if self.experience < 0:
            problems.append(f"experience must not be negative (got {self.experience})")
        if self.level < 1:
            problems.append(f"level must be at least 1 (got {self.level})")
        return problems
