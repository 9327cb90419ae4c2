"""Static story graph validation utilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal, Sequence

from talescape.core.types import NAVIGATION_TARGETS
from talescape.domain.defs import Condition, ConditionType, Effect, EffectType, Scene, Story
from talescape.domain.entities import MODIFIABLE_STAT_NAMES, STAT_NAMES

Severity = Literal["ERROR", "WARN"]


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]

    @property
    def is_error(self) -> bool:
        return self.severity == "ERROR"


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def errors_only(issues: Iterable[Issue]) -> list[Issue]:
    return [issue for issue in issues if issue.is_error]


def validate_story(story: Story) -> list[Issue]:
    """Return every structural problem in ``story``.

    ERROR issues make the story unplayable; WARN issues are advisory.
    """
    issues: list[Issue] = []
    scene_ids = _collect_scene_ids(story.scenes, issues)

    if story.starting_scene_id not in scene_ids:
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_START_SCENE",
                message=f"Starting scene '{story.starting_scene_id}' not found",
                context={"scene_id": story.starting_scene_id},
            )
        )

    for problem in story.initial_player_stats.invariant_violations():
        issues.append(
            Issue(
                severity="ERROR",
                code="INVALID_INITIAL_STATS",
                message=f"Initial player stats: {problem}",
                context={"story_id": story.id},
            )
        )

    for scene in story.scenes:
        _validate_scene(scene, scene_ids, issues)

    _validate_reachability(story, scene_ids, issues)
    return issues


def _collect_scene_ids(scenes: Sequence[Scene], issues: list[Issue]) -> set[str]:
    scene_ids: set[str] = set()
    for scene in scenes:
        if scene.id in scene_ids:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="DUPLICATE_SCENE_ID",
                    message=f"Duplicate scene ID: '{scene.id}'",
                    context={"scene_id": scene.id},
                )
            )
        scene_ids.add(scene.id)
    return scene_ids


def _validate_scene(scene: Scene, scene_ids: set[str], issues: list[Issue]) -> None:
    choice_ids: set[str] = set()
    for index, choice in enumerate(scene.choices):
        field_path = f"choices[{index}]"
        if choice.id in choice_ids:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="DUPLICATE_CHOICE_ID",
                    message=f"Scene '{scene.id}': Duplicate choice ID: '{choice.id}'",
                    context={"scene_id": scene.id, "choice_id": choice.id},
                )
            )
        choice_ids.add(choice.id)
        if choice.target_scene_id not in NAVIGATION_TARGETS and choice.target_scene_id not in scene_ids:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="MISSING_SCENE_REF",
                    message=(
                        f"Choice '{choice.id}': Target scene '{choice.target_scene_id}' not found"
                    ),
                    context={
                        "scene_id": scene.id,
                        "field_path": f"{field_path}.target_scene_id",
                        "referenced_id": choice.target_scene_id,
                    },
                )
            )
        _warn_on_unknown_stat_conditions(scene.id, choice.conditions, f"{field_path}.conditions", issues)
        _warn_on_unknown_stat_effects(scene.id, choice.effects, f"{field_path}.effects", issues)

    _warn_on_unknown_stat_conditions(scene.id, scene.conditions, "conditions", issues)
    _warn_on_unknown_stat_effects(scene.id, scene.effects, "effects", issues)

    if scene.is_ending:
        regular = [c for c in scene.choices if c.target_scene_id not in NAVIGATION_TARGETS]
        if regular:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="ENDING_HAS_CHOICES",
                    message=f"Ending scene '{scene.id}' should not have regular choices",
                    context={"scene_id": scene.id},
                )
            )
    elif not scene.choices:
        issues.append(
            Issue(
                severity="WARN",
                code="DEAD_END_SCENE",
                message=f"Scene '{scene.id}' has no choices and is not an ending",
                context={"scene_id": scene.id},
            )
        )


def _warn_on_unknown_stat_conditions(
    scene_id: str, conditions: Sequence[Condition] | None, context: str, issues: list[Issue]
) -> None:
    for index, condition in enumerate(conditions or ()):
        if condition.condition_type is not ConditionType.STAT or condition.key in STAT_NAMES:
            continue
        issues.append(
            Issue(
                severity="WARN",
                code="UNKNOWN_STAT",
                message=f"Stat condition references unknown stat '{condition.key}'",
                context={"scene_id": scene_id, "field_path": f"{context}[{index}]"},
            )
        )


def _warn_on_unknown_stat_effects(
    scene_id: str, effects: Sequence[Effect] | None, context: str, issues: list[Issue]
) -> None:
    for index, effect in enumerate(effects or ()):
        if effect.effect_type is not EffectType.MODIFY_STAT or effect.key in MODIFIABLE_STAT_NAMES:
            continue
        issues.append(
            Issue(
                severity="WARN",
                code="UNKNOWN_STAT",
                message=f"Effect modifies unknown stat '{effect.key}' and will be ignored",
                context={"scene_id": scene_id, "field_path": f"{context}[{index}]"},
            )
        )


def _validate_reachability(story: Story, scene_ids: set[str], issues: list[Issue]) -> None:
    if story.starting_scene_id not in scene_ids:
        return
    targets: dict[str, list[str]] = {}
    for scene in story.scenes:
        targets.setdefault(scene.id, []).extend(choice.target_scene_id for choice in scene.choices)
    reachable: set[str] = set()
    stack: list[str] = [story.starting_scene_id]
    while stack:
        scene_id = stack.pop()
        if scene_id in reachable:
            continue
        reachable.add(scene_id)
        for target in targets.get(scene_id, ()):
            if target in scene_ids:
                stack.append(target)
    for scene_id in sorted(scene_ids - reachable):
        issues.append(
            Issue(
                severity="WARN",
                code="UNREACHABLE_SCENE",
                message=f"Scene '{scene_id}' is unreachable from the starting scene",
                context={"scene_id": scene_id},
            )
        )
