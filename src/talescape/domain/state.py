"""Per-session game state."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from talescape.core.ids import new_id, utc_now
from talescape.core.types import JsonValue, as_bool, as_int, as_str
from talescape.domain.entities import Player


def format_playtime(seconds: int) -> str:
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


@dataclass(slots=True)
class GameStatistics:
    """Snapshot of progress figures for summary screens."""

    playtime_seconds: int
    total_scenes_visited: int
    unique_scenes_visited: int
    player_level: int
    total_experience: int
    inventory_size: int
    total_inventory_value: int
    flags_set: int
    game_start_time: datetime
    last_save_time: datetime | None

    @property
    def playtime_formatted(self) -> str:
        return format_playtime(self.playtime_seconds)


@dataclass
class GameState:
    """Mutable state of one play session.

    ``visited_scenes`` is a history, not a set: revisits append again.
    """

    story_id: str
    current_scene_id: str
    player: Player
    visited_scenes: List[str] = field(default_factory=list)
    flags: Dict[str, Any] = field(default_factory=dict)
    game_start_time: datetime = field(default_factory=utc_now)
    last_save_time: datetime | None = None
    playtime_seconds: int = 0
    id: str = field(default_factory=new_id)

    def visit_scene(self, scene_id: str) -> None:
        self.current_scene_id = scene_id
        self.visited_scenes.append(scene_id)

    def has_visited_scene(self, scene_id: str) -> bool:
        return scene_id in self.visited_scenes

    def scene_visit_count(self, scene_id: str) -> int:
        return self.visited_scenes.count(scene_id)

    @property
    def total_scenes_visited(self) -> int:
        return len(self.visited_scenes)

    @property
    def unique_scenes_visited(self) -> int:
        return len(set(self.visited_scenes))

    def set_flag(self, key: str, value: JsonValue) -> None:
        self.flags[key] = value

    def get_flag(self, key: str) -> JsonValue:
        return self.flags.get(key)

    def get_flag_as_bool(self, key: str) -> bool:
        return as_bool(self.flags.get(key)) or False

    def get_flag_as_int(self, key: str) -> int:
        value = as_int(self.flags.get(key))
        return 0 if value is None else value

    def get_flag_as_str(self, key: str) -> str:
        return as_str(self.flags.get(key)) or ""

    def remove_flag(self, key: str) -> JsonValue:
        return self.flags.pop(key, None)

    def clear_flags(self) -> None:
        self.flags.clear()

    def increment_flag(self, key: str, amount: int = 1) -> None:
        self.flags[key] = self.get_flag_as_int(key) + amount

    def decrement_flag(self, key: str, amount: int = 1) -> None:
        self.flags[key] = max(self.get_flag_as_int(key) - amount, 0)

    def toggle_flag(self, key: str) -> None:
        self.flags[key] = not self.get_flag_as_bool(key)

    def update_playtime(self, now: datetime | None = None) -> None:
        now = now or utc_now()
        self.playtime_seconds = max(int((now - self.game_start_time).total_seconds()), 0)

    def mark_saved(self, now: datetime | None = None) -> None:
        now = now or utc_now()
        self.update_playtime(now)
        self.last_save_time = now

    @property
    def playtime_formatted(self) -> str:
        return format_playtime(self.playtime_seconds)

    def statistics(self) -> GameStatistics:
        return GameStatistics(
            playtime_seconds=self.playtime_seconds,
            total_scenes_visited=self.total_scenes_visited,
            unique_scenes_visited=self.unique_scenes_visited,
            player_level=self.player.stats.level,
            total_experience=self.player.stats.experience,
            inventory_size=len(self.player.inventory),
            total_inventory_value=self.player.inventory_value(),
            flags_set=len(self.flags),
            game_start_time=self.game_start_time,
            last_save_time=self.last_save_time,
        )
