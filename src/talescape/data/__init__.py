"""Data layer utilities for loading and persisting JSON documents."""

from .errors import DataError, DataLoadError, DataValidationError
from .paths import get_saves_path, get_stories_path, get_user_data_dir

__all__ = [
    "DataError",
    "DataLoadError",
    "DataValidationError",
    "get_saves_path",
    "get_stories_path",
    "get_user_data_dir",
]
