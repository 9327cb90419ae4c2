"""Helpers for resolving per-user data locations."""
from __future__ import annotations

import os
from pathlib import Path


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "Talescape"
        return Path.home() / "Talescape"
    return Path.home() / ".config" / "talescape"


def get_stories_path(base_path: Path | str | None = None) -> Path:
    """Return the directory containing story JSON files."""
    if base_path is not None:
        return Path(base_path)
    return get_user_data_dir() / "stories"


def get_saves_path(base_path: Path | str | None = None) -> Path:
    """Return the directory containing save files."""
    if base_path is not None:
        return Path(base_path)
    return get_user_data_dir() / "saves"
