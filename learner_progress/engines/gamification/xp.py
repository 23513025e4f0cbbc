"""
XP Engine - streak-multiplied XP awards and level progress.

All functions are pure: they take a UserProgress and return a new one.
"""

from datetime import date
from typing import Dict, List, Tuple

from pydantic import BaseModel

from learner_progress.kernel.levels import LEVELS, get_level_for_xp, level_for_xp
from learner_progress.kernel.rounding import percentage, round_half_up
from learner_progress.schemas.progress import DailyActivity, UserProgress

XP_VALUES: Dict[str, int] = {
    "card_correct": 10,
    "card_perfect": 25,
    "card_difficult": 5,
    "card_wrong": 2,
    "daily_goal_bonus": 50,
    "first_card_of_day": 15,
}

# (minimum streak, multiplier), highest tier first
STREAK_MULTIPLIERS: List[Tuple[int, float]] = [
    (100, 1.5),
    (60, 1.4),
    (30, 1.25),
    (14, 1.15),
    (7, 1.1),
]


class XPAward(BaseModel):
    """Result of add_xp."""

    progress: UserProgress
    awarded: int
    multiplier: float
    previous_level: int

    @property
    def leveled_up(self) -> bool:
        return self.progress.level > self.previous_level


class LevelProgress(BaseModel):
    """XP earned inside the current level and XP the level spans."""

    current: int
    required: int
    progress: int


def day_key(day: date) -> str:
    return day.isoformat()


def streak_multiplier(current_streak: int) -> float:
    for minimum, multiplier in STREAK_MULTIPLIERS:
        if current_streak >= minimum:
            return multiplier
    return 1.0


def xp_for_answer(quality: int) -> int:
    """
    XP for one card review by answer quality (0-5).
    5 is perfect, 4 correct, 3 correct with difficulty, below 3 wrong.
    """
    if quality >= 5:
        return XP_VALUES["card_perfect"]
    if quality >= 4:
        return XP_VALUES["card_correct"]
    if quality >= 3:
        return XP_VALUES["card_difficult"]
    return XP_VALUES["card_wrong"]


def add_xp(amount: int, progress: UserProgress, today: date) -> XPAward:
    """
    Award XP scaled by the current streak multiplier.

    The level is recomputed from the new XP total and the awarded amount is
    added to today's daily activity.
    """
    if amount < 0:
        raise ValueError("XP amount must be non-negative")

    multiplier = streak_multiplier(progress.current_streak)
    awarded = round_half_up(amount * multiplier)
    new_xp = progress.xp + awarded

    key = day_key(today)
    activity = progress.daily_activity.get(key, DailyActivity())
    daily_activity = dict(progress.daily_activity)
    daily_activity[key] = DailyActivity(cards=activity.cards, xp=activity.xp + awarded)

    updated = progress.model_copy(update={
        "xp": new_xp,
        "level": level_for_xp(new_xp),
        "daily_activity": daily_activity,
    })
    return XPAward(
        progress=updated,
        awarded=awarded,
        multiplier=multiplier,
        previous_level=progress.level,
    )


def xp_for_next_level(xp: int) -> LevelProgress:
    current_level = get_level_for_xp(xp)
    next_level = next((lvl for lvl in LEVELS if lvl.level == current_level.level + 1), None)

    if next_level is None:
        return LevelProgress(current=xp, required=xp, progress=100)

    in_level = xp - current_level.xp_required
    span = next_level.xp_required - current_level.xp_required
    return LevelProgress(current=in_level, required=span, progress=percentage(in_level, span))
