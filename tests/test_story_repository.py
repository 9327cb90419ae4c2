import json
from pathlib import Path

import pytest

from talescape.data.codecs import story_to_dict
from talescape.data.errors import DataLoadError, DataValidationError
from talescape.data.repositories import StoryRepository, build_template_story
from talescape.domain.defs import Story
from tests.helpers.stories import build_demo_story


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    repo = StoryRepository(tmp_path)
    story = build_demo_story()
    repo.save(story)
    loaded = StoryRepository(tmp_path).load("demo")
    assert loaded == story
    assert loaded.get_scene("start").get_choice("lift").conditions == story.get_scene(
        "start"
    ).get_choice("lift").conditions


def test_load_is_cached(tmp_path: Path) -> None:
    repo = StoryRepository(tmp_path)
    repo.save(build_demo_story())
    assert repo.load("demo") is repo.load("demo")


def test_load_rejects_invalid_graph(tmp_path: Path) -> None:
    payload = story_to_dict(build_demo_story())
    payload["starting_scene_id"] = "missing"
    (tmp_path / "demo.json").write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(DataValidationError, match="MISSING_START_SCENE"):
        StoryRepository(tmp_path).load("demo")


def test_load_reports_bad_fields(tmp_path: Path) -> None:
    payload = story_to_dict(build_demo_story())
    payload["scenes"][0]["choices"][0]["effects"] = [{"effect_type": "Teleport", "key": "x"}]
    (tmp_path / "demo.json").write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(DataValidationError, match="effect_type"):
        StoryRepository(tmp_path).load("demo")


def test_missing_story_raises_load_error(tmp_path: Path) -> None:
    repo = StoryRepository(tmp_path)
    with pytest.raises(DataLoadError):
        repo.load("ghost")
    with pytest.raises(DataLoadError):
        repo.delete("ghost")


def test_save_refuses_invalid_story(tmp_path: Path) -> None:
    repo = StoryRepository(tmp_path)
    with pytest.raises(DataValidationError):
        repo.save(Story(id="empty", title="Empty", starting_scene_id="start"))
    assert not repo.exists("empty")


def test_list_stories_sorted_and_skips_unreadable(tmp_path: Path) -> None:
    repo = StoryRepository(tmp_path)
    repo.save(build_template_story("zeta", "Zeta Quest", "Ann"))
    repo.save(build_template_story("alpha", "Alpha Tale", "Bo"))
    (tmp_path / "junk.json").write_text("[1, 2", encoding="utf-8")
    stories = repo.list_stories()
    assert [meta.title for meta in stories] == ["Alpha Tale", "Zeta Quest"]
    assert stories[0].scene_count == 3
    assert stories[0].display_name == "Alpha Tale by Bo (v1.0.0)"


def test_create_template_and_delete(tmp_path: Path) -> None:
    repo = StoryRepository(tmp_path)
    story = repo.create_template("mine", "My Story", "Me")
    assert story.starting_scene_id == "start"
    assert repo.load("mine").scene_count == 3
    with pytest.raises(DataValidationError):
        repo.create_template("mine", "Again", "Me")
    repo.delete("mine")
    assert not repo.exists("mine")
    assert repo.list_stories() == []
