"""Story definition exports."""

from .condition_def import ComparisonOperator, Condition, ConditionType
from .effect_def import Effect, EffectOperation, EffectType
from .story_def import Choice, Scene, Story

__all__ = [
    "Choice",
    "ComparisonOperator",
    "Condition",
    "ConditionType",
    "Effect",
    "EffectOperation",
    "EffectType",
    "Scene",
    "Story",
]
