"""Repository for story files stored one JSON document per story."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from talescape.data import paths
from talescape.data.codecs import story_from_dict, story_to_dict
from talescape.data.errors import DataError, DataLoadError, DataValidationError
from talescape.data.json_loader import load_json, write_json
from talescape.domain.defs import Choice, Scene, Story
from talescape.domain.entities import PlayerStats
from talescape.services.story_graph_validator import errors_only, format_issue, validate_story

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoryMetadata:
    """Summary of a story file for selection menus."""

    id: str
    title: str
    description: str
    author: str
    version: str
    scene_count: int

    @property
    def display_name(self) -> str:
        return f"{self.title} by {self.author} (v{self.version})"


class StoryRepository:
    """Loads, lists and writes story definitions.

    Loaded stories are cached by id; writes and deletes invalidate the cache.
    """

    def __init__(self, base_path: Path | str | None = None) -> None:
        self._base_path = paths.get_stories_path(base_path)
        self._cache: Dict[str, Story] = {}

    @property
    def base_path(self) -> Path:
        return self._base_path

    def load(self, story_id: str) -> Story:
        """Parse and validate a story; raise DataError subclasses on failure."""
        if story_id in self._cache:
            return self._cache[story_id]
        story_path = self._story_path(story_id)
        logger.info("Loading story from: %s", story_path)
        story = story_from_dict(load_json(story_path))
        errors = errors_only(validate_story(story))
        if errors:
            raise DataValidationError(
                "Story validation failed: " + "; ".join(format_issue(issue) for issue in errors)
            )
        logger.info("Successfully loaded story: %s (%s)", story.title, story.id)
        self._cache[story_id] = story
        return story

    def list_stories(self) -> List[StoryMetadata]:
        """Return metadata for every readable story, sorted by title."""
        if not self._base_path.exists():
            return []
        stories: List[StoryMetadata] = []
        for path in sorted(self._base_path.glob("*.json")):
            try:
                stories.append(self._read_metadata(path))
            except DataError as exc:
                logger.warning("Failed to load metadata for story at %s: %s", path, exc)
        stories.sort(key=lambda meta: meta.title)
        return stories

    def exists(self, story_id: str) -> bool:
        return self._story_path(story_id).exists()

    def save(self, story: Story) -> Path:
        """Write ``story`` to disk; invalid stories are refused."""
        errors = errors_only(validate_story(story))
        if errors:
            raise DataValidationError(
                "Cannot save invalid story: " + "; ".join(format_issue(issue) for issue in errors)
            )
        story_path = self._story_path(story.id)
        write_json(story_path, story_to_dict(story))
        self._cache.pop(story.id, None)
        logger.info("Saved story: %s to %s", story.id, story_path)
        return story_path

    def delete(self, story_id: str) -> None:
        story_path = self._story_path(story_id)
        if not story_path.exists():
            raise DataLoadError(f"Story not found: {story_id}")
        story_path.unlink()
        self._cache.pop(story_id, None)
        logger.info("Deleted story: %s", story_id)

    def create_template(self, story_id: str, title: str, author: str) -> Story:
        """Write a small three-scene starter story and return it."""
        if self.exists(story_id):
            raise DataValidationError(f"Story already exists: {story_id}")
        story = build_template_story(story_id, title, author)
        self.save(story)
        logger.info("Created story template: %s", story_id)
        return story

    def _read_metadata(self, path: Path) -> StoryMetadata:
        raw = load_json(path)
        if not isinstance(raw, dict):
            raise DataValidationError(f"Expected top-level object in {path}")
        scenes = raw.get("scenes")

        def text(key: str, default: str) -> str:
            value = raw.get(key)
            return value if isinstance(value, str) else default

        return StoryMetadata(
            id=text("id", "unknown"),
            title=text("title", "Untitled"),
            description=text("description", "No description available"),
            author=text("author", "Unknown"),
            version=text("version", "1.0.0"),
            scene_count=len(scenes) if isinstance(scenes, list) else 0,
        )

    def _story_path(self, story_id: str) -> Path:
        return self._base_path / f"{story_id}.json"


def build_template_story(story_id: str, title: str, author: str) -> Story:
    story = Story(
        id=story_id,
        title=title,
        starting_scene_id="start",
        initial_player_stats=PlayerStats(),
        description="A new adventure awaits...",
        author=author,
    )
    start = Scene("start", "The Beginning", "Your adventure starts here. What will you do?")
    start.add_choice(Choice("explore", "Explore the area", "explore"))
    start.add_choice(Choice("rest", "Rest and think", "rest"))
    explore = Scene("explore", "Exploration", "You decide to explore your surroundings.")
    explore.add_choice(Choice("return", "Return to the beginning", "start"))
    rest = Scene("rest", "Contemplation", "You take a moment to rest and gather your thoughts.")
    rest.add_choice(Choice("continue", "Continue your journey", "start"))
    for scene in (start, explore, rest):
        story.add_scene(scene)
    return story
