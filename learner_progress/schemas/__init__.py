"""
Pydantic schemas for progress records, static catalogs and domain snapshots.
"""

from learner_progress.schemas.progress import (
    CEFR_ORDER,
    CEFRLevel,
    DailyActivity,
    LessonProgress,
    LevelScore,
    PlacementResult,
    UnitProgress,
    UnlockedAchievement,
    UserProgress,
)
from learner_progress.schemas.catalog import (
    Achievement,
    AchievementCategory,
    AchievementRarity,
    AchievementRequirement,
    CardsMasteredRequirement,
    CardsReviewedRequirement,
    CategoryMasteredRequirement,
    CurriculumLesson,
    CurriculumUnit,
    FirstActionRequirement,
    LevelRequirement,
    PerfectStreakRequirement,
    PlacementQuestion,
    StreakRequirement,
    XPRequirement,
)
from learner_progress.schemas.snapshots import (
    SNAPSHOT_TYPES,
    STORE_NAMES,
    AchievementsSnapshot,
    CurriculumSnapshot,
    Domain,
    DomainSnapshot,
    GrammarSnapshot,
    UserSnapshot,
)

__all__ = [
    "CEFR_ORDER",
    "CEFRLevel",
    "DailyActivity",
    "LessonProgress",
    "LevelScore",
    "PlacementResult",
    "UnitProgress",
    "UnlockedAchievement",
    "UserProgress",
    "Achievement",
    "AchievementCategory",
    "AchievementRarity",
    "AchievementRequirement",
    "CardsMasteredRequirement",
    "CardsReviewedRequirement",
    "CategoryMasteredRequirement",
    "CurriculumLesson",
    "CurriculumUnit",
    "FirstActionRequirement",
    "LevelRequirement",
    "PerfectStreakRequirement",
    "PlacementQuestion",
    "StreakRequirement",
    "XPRequirement",
    "SNAPSHOT_TYPES",
    "STORE_NAMES",
    "AchievementsSnapshot",
    "CurriculumSnapshot",
    "Domain",
    "DomainSnapshot",
    "GrammarSnapshot",
    "UserSnapshot",
]
