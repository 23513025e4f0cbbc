"""
Achievement requirement evaluation.

Every requirement is reduced to a (current, target) measurement. The unlock
predicate is current >= target and progress is derived from the same pair,
so progress reads 100 exactly when the predicate holds.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, Tuple

from learner_progress.engines.achievements.mastery import (
    CardMasterySource,
    EmptyMasterySource,
    category_mastery,
    count_mastered_cards,
)
from learner_progress.kernel.rounding import percentage
from learner_progress.schemas.catalog import Achievement, AchievementRequirement
from learner_progress.schemas.progress import UserProgress

Measurement = Tuple[int, int]


@dataclass
class AchievementContext:
    """Read-only view the rules are evaluated against."""

    progress: UserProgress
    mastery: CardMasterySource = field(default_factory=EmptyMasterySource)
    perfect_streak: int = 0
    has_imported: bool = False


def _first_action(req, ctx: AchievementContext) -> Measurement:
    if req.action == "review":
        return min(ctx.progress.total_cards_reviewed, 1), 1
    if req.action == "import":
        done = ctx.has_imported or len(ctx.mastery.cards()) > 0
        return (1 if done else 0), 1
    return 0, 1


def _category_mastered(req, ctx: AchievementContext) -> Measurement:
    mastered, total = category_mastery(ctx.mastery, req.category)
    if total == 0:
        # An empty category is never mastered
        return 0, 1
    return mastered, total


_MEASURES: Dict[str, Callable[..., Measurement]] = {
    "streak": lambda req, ctx: (ctx.progress.current_streak, req.days),
    "cards_reviewed": lambda req, ctx: (ctx.progress.total_cards_reviewed, req.count),
    "cards_mastered": lambda req, ctx: (count_mastered_cards(ctx.mastery), req.count),
    "perfect_streak": lambda req, ctx: (ctx.perfect_streak, req.count),
    "level": lambda req, ctx: (ctx.progress.level, req.level),
    "xp": lambda req, ctx: (ctx.progress.xp, req.amount),
    "first_action": _first_action,
    "category_mastered": _category_mastered,
}


def measure(requirement: AchievementRequirement, context: AchievementContext) -> Measurement:
    return _MEASURES[requirement.type](requirement, context)


def is_requirement_met(requirement: AchievementRequirement, context: AchievementContext) -> bool:
    current, target = measure(requirement, context)
    return current >= target


def get_achievement_progress(achievement: Achievement, context: AchievementContext) -> int:
    """0-100 toward unlocking. Unmet requirements are capped at 99."""
    current, target = measure(achievement.requirement, context)
    if current >= target:
        return 100
    return min(99, percentage(current, target))
