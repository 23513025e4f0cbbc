"""
Achievements - declarative requirements evaluated against learner state.
"""

from learner_progress.engines.achievements.catalog import ACHIEVEMENTS, achievements_by_id
from learner_progress.engines.achievements.engine import AchievementEngine, AchievementStatus
from learner_progress.engines.achievements.mastery import (
    CATALAN_TO_ENGLISH,
    DIRECTIONS,
    ENGLISH_TO_CATALAN,
    MASTERY_INTERVAL_DAYS,
    CardMasterySource,
    EmptyMasterySource,
    IntervalMasterySource,
    MasteryCard,
    category_mastery,
    count_mastered_cards,
)
from learner_progress.engines.achievements.rules import (
    AchievementContext,
    get_achievement_progress,
    is_requirement_met,
    measure,
)

__all__ = [
    "ACHIEVEMENTS",
    "achievements_by_id",
    "AchievementEngine",
    "AchievementStatus",
    "AchievementContext",
    "get_achievement_progress",
    "is_requirement_met",
    "measure",
    "CATALAN_TO_ENGLISH",
    "DIRECTIONS",
    "ENGLISH_TO_CATALAN",
    "MASTERY_INTERVAL_DAYS",
    "CardMasterySource",
    "EmptyMasterySource",
    "IntervalMasterySource",
    "MasteryCard",
    "category_mastery",
    "count_mastered_cards",
]
