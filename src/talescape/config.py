"""Engine configuration persistence and logging setup."""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict

from talescape.data.paths import get_saves_path, get_stories_path, get_user_data_dir
from talescape.data.save_store import SaveStore
from talescape.services.events import DEFAULT_EVENT_LOG_CAPACITY, EventObserver
from talescape.services.narrative_engine import DEFAULT_PLAYER_NAME, NarrativeEngine

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_DEFAULT_LOG_LEVEL = "INFO"
_DEFAULT_MAX_SAVES = 50
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(slots=True)
class EngineConfig:
    """User-tunable engine settings."""

    stories_dir: Path = field(default_factory=get_stories_path)
    saves_dir: Path = field(default_factory=get_saves_path)
    event_log_capacity: int = DEFAULT_EVENT_LOG_CAPACITY
    default_player_name: str = DEFAULT_PLAYER_NAME
    max_saves_per_story: int = _DEFAULT_MAX_SAVES
    auto_cleanup_saves: bool = True
    log_level: str = _DEFAULT_LOG_LEVEL

    def to_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["stories_dir"] = str(self.stories_dir)
        payload["saves_dir"] = str(self.saves_dir)
        return payload


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def _normalize_positive_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return default
    return value


def _normalize_log_level(value: object) -> str:
    if isinstance(value, str) and value.upper() in _LOG_LEVELS:
        return value.upper()
    return _DEFAULT_LOG_LEVEL


def _normalize_path(value: object, default: Path) -> Path:
    if isinstance(value, str) and value.strip():
        return Path(value).expanduser()
    return default


def _normalize(raw: Dict[str, Any]) -> EngineConfig:
    defaults = EngineConfig()
    name = raw.get("default_player_name")
    auto_cleanup = raw.get("auto_cleanup_saves")
    return EngineConfig(
        stories_dir=_normalize_path(raw.get("stories_dir"), defaults.stories_dir),
        saves_dir=_normalize_path(raw.get("saves_dir"), defaults.saves_dir),
        event_log_capacity=_normalize_positive_int(
            raw.get("event_log_capacity"), defaults.event_log_capacity
        ),
        default_player_name=(
            name if isinstance(name, str) and name.strip() else DEFAULT_PLAYER_NAME
        ),
        max_saves_per_story=_normalize_positive_int(
            raw.get("max_saves_per_story"), defaults.max_saves_per_story
        ),
        auto_cleanup_saves=auto_cleanup if isinstance(auto_cleanup, bool) else True,
        log_level=_normalize_log_level(raw.get("log_level")),
    )


def load_config(path: Path | None = None) -> EngineConfig:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return EngineConfig()
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        return EngineConfig()
    if not isinstance(raw, dict):
        return EngineConfig()
    return _normalize(raw)


def save_config(config: EngineConfig, path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = _normalize(config.to_dict()).to_dict()
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


def configure_logging(config: EngineConfig) -> None:
    """Install a basic stream handler at the configured level."""
    logging.basicConfig(level=getattr(logging, config.log_level), format=_LOG_FORMAT)
    logging.getLogger("talescape").setLevel(config.log_level)


def build_engine(config: EngineConfig, observer: EventObserver | None = None) -> NarrativeEngine:
    return NarrativeEngine(
        observer,
        event_log_capacity=config.event_log_capacity,
        default_player_name=config.default_player_name,
    )


def build_save_store(config: EngineConfig) -> SaveStore:
    """Save store rooted at ``saves_dir``; pruning follows ``auto_cleanup_saves``."""
    keep = config.max_saves_per_story if config.auto_cleanup_saves else None
    return SaveStore(config.saves_dir, max_saves_per_story=keep)
