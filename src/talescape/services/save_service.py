"""Serialization helpers for manual save/load."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping

from talescape import __version__
from talescape.core.ids import new_id, utc_now
from talescape.data.codecs import game_state_from_dict, game_state_to_dict, parse_datetime
from talescape.data.errors import DataValidationError
from talescape.domain.state import GameState

from .errors import SaveLoadError

logger = logging.getLogger(__name__)

SavePayload = Dict[str, Any]


@dataclass(slots=True)
class SaveGame:
    """A named snapshot of a GameState."""

    name: str
    game_state: GameState
    description: str | None = None
    save_time: datetime = field(default_factory=utc_now)
    version: str = __version__
    metadata: Dict[str, Any] | None = None
    id: str = field(default_factory=new_id)


class SaveService:
    """Converts runtime state to/from JSON-compatible payloads."""

    SAVE_VERSION = __version__

    def create_save(
        self, name: str, game_state: GameState, description: str | None = None
    ) -> SaveGame:
        return SaveGame(
            name=name,
            game_state=game_state,
            description=description,
            version=self.SAVE_VERSION,
        )

    def serialize_state(self, state: GameState) -> SavePayload:
        return game_state_to_dict(state)

    def deserialize_state(self, payload: object) -> GameState:
        try:
            return game_state_from_dict(payload)
        except DataValidationError as exc:
            raise SaveLoadError(f"Invalid game state: {exc}") from exc

    def serialize_save(self, save: SaveGame) -> SavePayload:
        """Return a JSON-serializable payload for disk persistence."""
        return {
            "id": save.id,
            "name": save.name,
            "description": save.description,
            "game_state": self.serialize_state(save.game_state),
            "save_time": save.save_time.isoformat(),
            "version": save.version,
            "metadata": save.metadata,
        }

    def deserialize_save(self, payload: Mapping[str, Any]) -> SaveGame:
        """Rehydrate a SaveGame from a persisted payload."""
        if not isinstance(payload, Mapping):
            raise SaveLoadError("Save data must be a JSON object.")
        save_id = self._require_str(payload.get("id"), "id")
        name = self._require_str(payload.get("name"), "name")
        description = payload.get("description")
        if description is not None and not isinstance(description, str):
            raise SaveLoadError("description must be a string if provided.")
        version = self._require_str(payload.get("version"), "version")
        if version != self.SAVE_VERSION:
            logger.warning("Save game version mismatch: %s vs %s", version, self.SAVE_VERSION)
        metadata = payload.get("metadata")
        if metadata is not None and not isinstance(metadata, Mapping):
            raise SaveLoadError("metadata must be an object if provided.")
        try:
            save_time = parse_datetime(payload.get("save_time"), "save_time")
        except DataValidationError as exc:
            raise SaveLoadError(str(exc)) from exc
        return SaveGame(
            id=save_id,
            name=name,
            description=description,
            game_state=self.deserialize_state(payload.get("game_state")),
            save_time=save_time,
            version=version,
            metadata=dict(metadata) if metadata is not None else None,
        )

    def build_metadata(self, save: SaveGame) -> Dict[str, Any]:
        """Summary fields shown in save/load menus."""
        state = save.game_state
        return {
            "save_id": save.id,
            "name": save.name,
            "story_id": state.story_id,
            "player_name": state.player.name,
            "player_level": state.player.stats.level,
            "current_scene_id": state.current_scene_id,
            "playtime_seconds": state.playtime_seconds,
            "saved_at": save.save_time.isoformat(),
        }

    @staticmethod
    def _require_str(value: object, context: str) -> str:
        if not isinstance(value, str):
            raise SaveLoadError(f"{context} must be a string.")
        return value
