"""Service-layer exceptions."""
from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from talescape.domain.errors import NarrativeError, UnknownStatError

if TYPE_CHECKING:
    from .story_graph_validator import Issue


class InvalidStoryError(NarrativeError):
    """Raised when a story fails structural validation."""

    def __init__(self, issues: Sequence["Issue"]) -> None:
        self.issues = list(issues)
        details = "; ".join(issue.message for issue in self.issues)
        super().__init__(f"Story validation failed: {details}")


class EngineStateError(NarrativeError):
    """Raised when an operation is invoked in the wrong lifecycle state."""


class NoStoryLoadedError(EngineStateError):
    def __init__(self) -> None:
        super().__init__("No story loaded")


class NoActiveGameError(EngineStateError):
    def __init__(self) -> None:
        super().__init__("No active game")


class StoryError(NarrativeError):
    """Raised for story-level failures during play."""


class ChoiceDisabledError(StoryError):
    def __init__(self, choice_id: str, reason: str | None) -> None:
        self.choice_id = choice_id
        self.reason = reason or "Unknown reason"
        super().__init__(f"Choice is disabled: {self.reason}")


class StoryMismatchError(StoryError):
    def __init__(self, expected_story_id: str, actual_story_id: str) -> None:
        self.expected_story_id = expected_story_id
        self.actual_story_id = actual_story_id
        super().__init__(
            f"Game state story ID '{actual_story_id}' does not match loaded story "
            f"'{expected_story_id}'"
        )


class DataLookupError(NarrativeError):
    """Raised when a scene or choice id cannot be resolved mid-game."""


class SceneNotFoundError(DataLookupError):
    def __init__(self, scene_id: str) -> None:
        self.scene_id = scene_id
        super().__init__(f"Scene not found: {scene_id}")


class ChoiceNotFoundError(DataLookupError):
    def __init__(self, choice_id: str) -> None:
        self.choice_id = choice_id
        super().__init__(f"Choice not found: {choice_id}")


class SaveLoadError(NarrativeError):
    """Raised when save or load operations fail."""


__all__ = [
    "ChoiceDisabledError",
    "ChoiceNotFoundError",
    "DataLookupError",
    "EngineStateError",
    "InvalidStoryError",
    "NarrativeError",
    "NoActiveGameError",
    "NoStoryLoadedError",
    "SaveLoadError",
    "SceneNotFoundError",
    "StoryError",
    "StoryMismatchError",
    "UnknownStatError",
]
