"""Occurrence records and the observers that receive them.

Effect application and engine transitions produce occurrences; observers
only look at them and never mutate game state.
"""
from __future__ import annotations

import json
import logging
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Deque, Iterable, List, Protocol, Sequence, Type, TypeVar

from talescape.core.ids import new_id, utc_now
from talescape.core.types import JsonValue

logger = logging.getLogger(__name__)

DEFAULT_EVENT_LOG_CAPACITY = 1000


@dataclass(slots=True)
class Occurrence:
    """Base class for observable state changes."""

    @property
    def event_type(self) -> str:
        return type(self).__name__


@dataclass(slots=True)
class FlagChanged(Occurrence):
    flag_name: str
    old_value: JsonValue
    new_value: JsonValue


@dataclass(slots=True)
class StatChanged(Occurrence):
    stat_name: str
    old_value: int
    new_value: int

    @property
    def change(self) -> int:
        return self.new_value - self.old_value


@dataclass(slots=True)
class ItemAdded(Occurrence):
    item_id: str
    item_name: str
    quantity: int


@dataclass(slots=True)
class ItemRemoved(Occurrence):
    item_id: str
    item_name: str
    quantity: int


@dataclass(slots=True)
class LevelUp(Occurrence):
    old_level: int
    new_level: int
    experience: int


@dataclass(slots=True)
class PlayerDied(Occurrence):
    cause: str = "Health reached zero"


@dataclass(slots=True)
class CustomOccurrence(Occurrence):
    name: str
    value: JsonValue = None


@dataclass(slots=True)
class StoryLoaded(Occurrence):
    story_id: str


@dataclass(slots=True)
class GameStarted(Occurrence):
    story_id: str
    player_name: str


@dataclass(slots=True)
class GameLoaded(Occurrence):
    game_id: str


@dataclass(slots=True)
class GameSaved(Occurrence):
    save_name: str


@dataclass(slots=True)
class GameEnded(Occurrence):
    ending_scene_id: str


@dataclass(slots=True)
class ChoiceMade(Occurrence):
    choice_id: str
    choice_text: str
    from_scene: str
    target_scene: str


@dataclass(slots=True)
class SceneEntered(Occurrence):
    scene_id: str
    scene_title: str


class EventObserver(Protocol):
    def observe(self, occurrence: Occurrence) -> None:
        ...


class CompositeObserver:
    """Fans each occurrence out to registered observers in order.

    Delivery is best effort: a failing observer is logged and skipped.
    """

    def __init__(self, observers: Iterable[EventObserver] = ()) -> None:
        self._observers: List[EventObserver] = list(observers)

    def add_observer(self, observer: EventObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: EventObserver) -> None:
        self._observers.remove(observer)

    @property
    def observers(self) -> Sequence[EventObserver]:
        return tuple(self._observers)

    def observe(self, occurrence: Occurrence) -> None:
        for observer in self._observers:
            try:
                observer.observe(occurrence)
            except Exception:
                logger.warning(
                    "Observer %r failed on %s", observer, occurrence.event_type, exc_info=True
                )


@dataclass(slots=True)
class LoggedEvent:
    occurrence: Occurrence
    timestamp: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=new_id)

    @property
    def event_type(self) -> str:
        return self.occurrence.event_type

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "event_type": self.event_type,
            "timestamp": self.timestamp.isoformat(),
            "data": asdict(self.occurrence),
        }


O = TypeVar("O", bound=Occurrence)


class EventLog:
    """Bounded in-memory history of occurrences; the oldest entry is evicted first."""

    def __init__(self, capacity: int = DEFAULT_EVENT_LOG_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("Event log capacity must be at least 1.")
        self._events: Deque[LoggedEvent] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        assert self._events.maxlen is not None
        return self._events.maxlen

    def observe(self, occurrence: Occurrence) -> None:
        self._events.append(LoggedEvent(occurrence=occurrence))

    def events(self) -> List[LoggedEvent]:
        return list(self._events)

    def events_of_type(self, occurrence_type: Type[O]) -> List[LoggedEvent]:
        return [event for event in self._events if isinstance(event.occurrence, occurrence_type)]

    def recent(self, count: int) -> List[LoggedEvent]:
        """Return up to ``count`` events, newest first."""
        if count <= 0:
            return []
        return list(reversed(self._events))[:count]

    @property
    def count(self) -> int:
        return len(self._events)

    def count_of_type(self, occurrence_type: Type[Occurrence]) -> int:
        return len(self.events_of_type(occurrence_type))

    def clear(self) -> None:
        self._events.clear()

    def export_json(self) -> str:
        return json.dumps([event.to_dict() for event in self._events], indent=2, default=str)
