"""Service layer exports."""

from .errors import InvalidStoryError, NarrativeError, SaveLoadError
from .events import CompositeObserver, EventLog, EventObserver, Occurrence
from .narrative_engine import ChoiceResult, EngineState, NarrativeEngine
from .save_service import SaveGame, SaveService
from .story_graph_validator import Issue, validate_story

__all__ = [
    "InvalidStoryError",
    "NarrativeError",
    "SaveLoadError",
    "CompositeObserver",
    "EventLog",
    "EventObserver",
    "Occurrence",
    "ChoiceResult",
    "EngineState",
    "NarrativeEngine",
    "SaveGame",
    "SaveService",
    "Issue",
    "validate_story",
]
