"""File-system storage for save payloads, one JSON file per save id."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List

from talescape.core.ids import new_id

from . import paths
from .codecs import parse_datetime
from .errors import DataError, DataLoadError, DataValidationError
from .json_loader import load_json, write_json

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(slots=True)
class SaveFileMetadata:
    """Describes a save file for menu display."""

    id: str
    path: Path
    name: str = "Untitled"
    description: str | None = None
    save_time: datetime | None = None
    version: str = "unknown"
    story_id: str = "unknown"
    player_name: str = "Unknown"
    player_level: int = 1
    playtime_seconds: int = 0
    is_corrupt: bool = False


class SaveStore:
    """Reads and writes save payloads produced by SaveService.

    With ``max_saves_per_story`` set, each write prunes the oldest saves of
    the same story beyond that limit.
    """

    def __init__(
        self, base_dir: Path | str | None = None, *, max_saves_per_story: int | None = None
    ) -> None:
        if max_saves_per_story is not None and max_saves_per_story < 1:
            raise ValueError("max_saves_per_story must be at least 1.")
        self._base_dir = paths.get_saves_path(base_dir)
        self._max_saves_per_story = max_saves_per_story

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def write(self, payload: Dict[str, Any]) -> Path:
        save_id = payload.get("id")
        if not isinstance(save_id, str) or not save_id:
            raise DataValidationError("Save payload must carry a string id.")
        path = self._save_path(save_id)
        write_json(path, payload)
        logger.info("Game saved successfully: %s (%s)", payload.get("name"), save_id)
        logger.debug("Save file written to: %s", path)
        if self._max_saves_per_story is not None:
            self.cleanup_old_saves(self._max_saves_per_story, story_id=_story_id_of(payload))
        return path

    def read(self, save_id: str) -> Dict[str, Any]:
        path = self._save_path(save_id)
        if not path.exists():
            raise DataLoadError(f"Save file not found: {save_id}")
        payload = load_json(path)
        if not isinstance(payload, dict):
            raise DataValidationError(f"Expected top-level object in {path}")
        return payload

    def exists(self, save_id: str) -> bool:
        return self._save_path(save_id).exists()

    def delete(self, save_id: str) -> None:
        path = self._save_path(save_id)
        if not path.exists():
            raise DataLoadError(f"Save file not found: {save_id}")
        path.unlink()
        logger.info("Deleted save game: %s", save_id)

    def list_saves(self) -> List[SaveFileMetadata]:
        """Return metadata for every save, newest first; unreadable files are flagged."""
        if not self._base_dir.exists():
            return []
        saves: List[SaveFileMetadata] = []
        for path in self._base_dir.glob("*.json"):
            try:
                saves.append(self._read_metadata(path))
            except DataError as exc:
                logger.warning("Failed to load save metadata from %s: %s", path, exc)
                saves.append(SaveFileMetadata(id=path.stem, path=path, is_corrupt=True))
        saves.sort(key=lambda meta: meta.save_time or _EPOCH, reverse=True)
        return saves

    def count(self) -> int:
        if not self._base_dir.exists():
            return 0
        return sum(1 for _ in self._base_dir.glob("*.json"))

    def cleanup_old_saves(self, keep_count: int, story_id: str | None = None) -> int:
        """Delete the oldest saves beyond ``keep_count``; return how many were removed.

        ``story_id`` limits the pruning to saves of one story.
        """
        saves = self.list_saves()
        if story_id is not None:
            saves = [meta for meta in saves if meta.story_id == story_id]
        if len(saves) <= keep_count:
            return 0
        deleted = 0
        for meta in saves[keep_count:]:
            try:
                self.delete(meta.id)
            except OSError as exc:
                logger.error("Failed to delete old save %s: %s", meta.name, exc)
                continue
            deleted += 1
        logger.info("Cleaned up %d old save games", deleted)
        return deleted

    def export_save(self, save_id: str, export_path: Path | str) -> Path:
        target = Path(export_path)
        write_json(target, self.read(save_id))
        logger.info("Exported save game to: %s", target)
        return target

    def import_save(self, import_path: Path | str) -> Dict[str, Any]:
        """Copy an exported save into the store under a fresh id."""
        source = Path(import_path)
        payload = load_json(source)
        if not isinstance(payload, dict):
            raise DataValidationError(f"Expected top-level object in {source}")
        payload["id"] = new_id()
        payload["name"] = f"{payload.get('name', 'Untitled')} (Imported)"
        self.write(payload)
        logger.info("Imported save game: %s", payload["name"])
        return payload

    def _read_metadata(self, path: Path) -> SaveFileMetadata:
        payload = load_json(path)
        if not isinstance(payload, dict):
            raise DataValidationError(f"Expected top-level object in {path}")
        save_id = payload.get("id")
        if not isinstance(save_id, str):
            raise DataValidationError("Save file missing ID")
        save_time = parse_datetime(payload.get("save_time"), "save_time")

        state = payload.get("game_state") if isinstance(payload.get("game_state"), dict) else {}
        player = state.get("player") if isinstance(state.get("player"), dict) else {}
        stats = player.get("stats") if isinstance(player.get("stats"), dict) else {}

        def pick(source: Dict[str, Any], key: str, expected: type, default: Any) -> Any:
            value = source.get(key)
            if isinstance(value, bool) and expected is not bool:
                return default
            return value if isinstance(value, expected) else default

        return SaveFileMetadata(
            id=save_id,
            path=path,
            name=pick(payload, "name", str, "Untitled"),
            description=pick(payload, "description", str, None),
            save_time=save_time,
            version=pick(payload, "version", str, "unknown"),
            story_id=pick(state, "story_id", str, "unknown"),
            player_name=pick(player, "name", str, "Unknown"),
            player_level=pick(stats, "level", int, 1),
            playtime_seconds=pick(state, "playtime_seconds", int, 0),
        )

    def _save_path(self, save_id: str) -> Path:
        return self._base_dir / f"{save_id}.json"


def _story_id_of(payload: Dict[str, Any]) -> str:
    state = payload.get("game_state")
    story_id = state.get("story_id") if isinstance(state, dict) else None
    return story_id if isinstance(story_id, str) else "unknown"
