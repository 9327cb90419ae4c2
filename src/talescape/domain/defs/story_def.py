"""Story graph structures: stories, scenes and choices."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from talescape.core.types import NAVIGATION_TARGETS
from talescape.domain.entities import PlayerStats

from .condition_def import Condition
from .effect_def import Effect


@dataclass(slots=True)
class Choice:
    """A directed edge from one scene to another.

    ``disabled`` is an authored override; the engine recomputes it from
    ``conditions`` on the copies it hands out.
    """

    id: str
    text: str
    target_scene_id: str
    conditions: List[Condition] | None = None
    effects: List[Effect] | None = None
    disabled: bool = False
    disabled_reason: str | None = None
    metadata: Dict[str, Any] | None = None

    @property
    def is_navigation(self) -> bool:
        """True when the target is END, RESTART or MAIN_MENU."""
        return self.target_scene_id in NAVIGATION_TARGETS


@dataclass(slots=True)
class Scene:
    """A node in the story graph."""

    id: str
    title: str
    description: str
    choices: List[Choice] = field(default_factory=list)
    # Reserved for scene-entry gating; transitions do not consult it.
    conditions: List[Condition] | None = None
    effects: List[Effect] | None = None
    is_ending: bool = False
    background_music: str | None = None
    image: str | None = None
    metadata: Dict[str, Any] | None = None

    def add_choice(self, choice: Choice) -> None:
        self.choices.append(choice)

    def get_choice(self, choice_id: str) -> Choice | None:
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


@dataclass(slots=True)
class Story:
    """A complete story graph plus the player template it starts from."""

    id: str
    title: str
    starting_scene_id: str
    scenes: List[Scene] = field(default_factory=list)
    initial_player_stats: PlayerStats = field(default_factory=PlayerStats)
    description: str = ""
    author: str = ""
    version: str = "1.0.0"
    metadata: Dict[str, Any] | None = None

    def add_scene(self, scene: Scene) -> None:
        self.scenes.append(scene)

    def get_scene(self, scene_id: str) -> Scene | None:
        for scene in self.scenes:
            if scene.id == scene_id:
                return scene
        return None

    def get_starting_scene(self) -> Scene | None:
        return self.get_scene(self.starting_scene_id)

    def get_endings(self) -> List[Scene]:
        return [scene for scene in self.scenes if scene.is_ending]

    @property
    def scene_count(self) -> int:
        return len(self.scenes)
