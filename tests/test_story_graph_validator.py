from talescape.domain.defs import Choice, Condition, Effect, EffectOperation, Scene, Story
from talescape.domain.entities import PlayerStats
from talescape.services.story_graph_validator import errors_only, format_issue, validate_story
from tests.helpers.stories import build_demo_story


def _codes(story: Story) -> list[str]:
    return [issue.code for issue in validate_story(story)]


def test_demo_story_is_clean() -> None:
    assert validate_story(build_demo_story()) == []


def test_missing_start_and_target_are_errors() -> None:
    story = Story(id="s", title="S", starting_scene_id="nope")
    story.add_scene(Scene("a", "A", "", choices=[Choice("go", "Go", "ghost")]))
    issues = validate_story(story)
    assert [issue.code for issue in errors_only(issues)] == [
        "MISSING_START_SCENE",
        "MISSING_SCENE_REF",
    ]
    ref_issue = errors_only(issues)[1]
    assert ref_issue.context["referenced_id"] == "ghost"
    assert ref_issue.context["field_path"] == "choices[0].target_scene_id"


def test_navigation_targets_are_valid_references() -> None:
    story = Story(id="s", title="S", starting_scene_id="a")
    story.add_scene(
        Scene(
            "a",
            "A",
            "",
            choices=[Choice("menu", "Menu", "MAIN_MENU"), Choice("end", "End", "END")],
        )
    )
    assert errors_only(validate_story(story)) == []


def test_duplicate_ids_are_errors() -> None:
    story = Story(id="s", title="S", starting_scene_id="a")
    story.add_scene(
        Scene("a", "A", "", choices=[Choice("x", "X", "a"), Choice("x", "X again", "a")])
    )
    story.add_scene(Scene("a", "A copy", "", choices=[Choice("y", "Y", "a")]))
    codes = _codes(story)
    assert "DUPLICATE_SCENE_ID" in codes
    assert "DUPLICATE_CHOICE_ID" in codes


def test_ending_with_regular_choices_is_error() -> None:
    story = Story(id="s", title="S", starting_scene_id="a")
    story.add_scene(Scene("a", "A", "", choices=[Choice("go", "Go", "b")]))
    story.add_scene(
        Scene(
            "b",
            "B",
            "",
            is_ending=True,
            choices=[Choice("again", "Again", "RESTART"), Choice("back", "Back", "a")],
        )
    )
    assert _codes(story) == ["ENDING_HAS_CHOICES"]


def test_dead_end_and_unreachable_are_warnings() -> None:
    story = Story(id="s", title="S", starting_scene_id="a")
    story.add_scene(Scene("a", "A", "", choices=[Choice("go", "Go", "b")]))
    story.add_scene(Scene("b", "B", ""))
    story.add_scene(Scene("island", "Island", "", is_ending=True))
    issues = validate_story(story)
    assert errors_only(issues) == []
    assert sorted(issue.code for issue in issues) == ["DEAD_END_SCENE", "UNREACHABLE_SCENE"]


def test_unknown_stat_references_are_warnings() -> None:
    story = Story(id="s", title="S", starting_scene_id="a")
    story.add_scene(
        Scene(
            "a",
            "A",
            "",
            effects=[Effect.modify_stat("luck", 1, EffectOperation.ADD)],
            choices=[
                Choice(
                    "go",
                    "Go",
                    "END",
                    conditions=[Condition.stat_greater_than("mana", 3)],
                )
            ],
        )
    )
    issues = validate_story(story)
    assert [issue.code for issue in issues] == ["UNKNOWN_STAT", "UNKNOWN_STAT"]
    assert all(not issue.is_error for issue in issues)


def test_invalid_initial_stats_are_errors() -> None:
    story = build_demo_story()
    story.initial_player_stats = PlayerStats(health=150, max_health=100, strength=0)
    issues = errors_only(validate_story(story))
    assert [issue.code for issue in issues] == ["INVALID_INITIAL_STATS", "INVALID_INITIAL_STATS"]


def test_format_issue_includes_context() -> None:
    story = Story(id="s", title="S", starting_scene_id="nope")
    story.add_scene(Scene("a", "A", "", is_ending=True))
    formatted = format_issue(errors_only(validate_story(story))[0])
    assert formatted.startswith("[ERROR] MISSING_START_SCENE:")
    assert "scene_id=nope" in formatted
