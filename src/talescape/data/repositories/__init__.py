"""Repository exports."""

from .story_repo import StoryMetadata, StoryRepository, build_template_story

__all__ = ["StoryMetadata", "StoryRepository", "build_template_story"]
