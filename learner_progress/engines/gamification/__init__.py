"""
Gamification - streak transitions, XP awards and level lookup.
"""

from learner_progress.engines.gamification.streak import (
    StreakUpdate,
    record_study_session,
    update_cards_learned,
    update_streak,
    use_streak_freeze,
)
from learner_progress.engines.gamification.xp import (
    STREAK_MULTIPLIERS,
    XP_VALUES,
    LevelProgress,
    XPAward,
    add_xp,
    streak_multiplier,
    xp_for_answer,
    xp_for_next_level,
)
from learner_progress.kernel.levels import LEVELS, Level, get_level_for_xp, level_for_xp

__all__ = [
    "LEVELS",
    "Level",
    "get_level_for_xp",
    "level_for_xp",
    "STREAK_MULTIPLIERS",
    "XP_VALUES",
    "LevelProgress",
    "XPAward",
    "add_xp",
    "streak_multiplier",
    "xp_for_answer",
    "xp_for_next_level",
    "StreakUpdate",
    "update_streak",
    "use_streak_freeze",
    "record_study_session",
    "update_cards_learned",
]
