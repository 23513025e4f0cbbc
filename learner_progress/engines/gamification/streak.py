"""
Streak Engine - day-granularity streak continuation with a single-use freeze.

Transitions (gap = days between last_study_date and today):
- no previous study      -> streak 1
- gap 0 (same day)       -> unchanged, idempotent
- gap 1                  -> streak + 1
- gap 2 and freeze ready -> streak + 1, freeze consumed
- anything else          -> streak 1
"""

from datetime import date
from typing import Optional, Tuple

from pydantic import BaseModel

from learner_progress.engines.gamification.xp import day_key
from learner_progress.schemas.progress import DailyActivity, UserProgress


class StreakUpdate(BaseModel):
    """Result of update_streak."""

    progress: UserProgress
    changed: bool
    used_freeze: bool = False


def _next_streak(progress: UserProgress, today: date) -> Tuple[Optional[int], bool]:
    """(new streak or None for a no-op, freeze consumed)."""
    last = progress.last_study_date
    if last is None:
        return 1, False

    gap = (today - last).days
    if gap == 0:
        return None, False
    if gap == 1:
        return progress.current_streak + 1, False
    if gap == 2 and progress.streak_freeze_available:
        return progress.current_streak + 1, True
    # Also covers a clock that moved backwards
    return 1, False


def update_streak(today: date, progress: UserProgress) -> StreakUpdate:
    new_streak, used_freeze = _next_streak(progress, today)
    if new_streak is None:
        return StreakUpdate(progress=progress, changed=False)

    update = {
        "current_streak": new_streak,
        "longest_streak": max(progress.longest_streak, new_streak),
        "last_study_date": today,
    }
    if used_freeze:
        update["streak_freeze_available"] = False
        update["last_streak_freeze_used"] = today

    return StreakUpdate(
        progress=progress.model_copy(update=update),
        changed=True,
        used_freeze=used_freeze,
    )


def use_streak_freeze(progress: UserProgress, today: date) -> Tuple[UserProgress, bool]:
    """Spend the freeze manually. Returns (progress, spent)."""
    if not progress.streak_freeze_available:
        return progress, False
    return progress.model_copy(update={
        "streak_freeze_available": False,
        "last_streak_freeze_used": today,
    }), True


def record_study_session(
    progress: UserProgress,
    cards_reviewed: int,
    correct_answers: int,
    time_spent_ms: int,
    today: date,
) -> UserProgress:
    """Add session totals and today's reviewed cards. XP is credited by add_xp."""
    if min(cards_reviewed, correct_answers, time_spent_ms) < 0:
        raise ValueError("session totals must be non-negative")

    key = day_key(today)
    activity = progress.daily_activity.get(key, DailyActivity())
    daily_activity = dict(progress.daily_activity)
    daily_activity[key] = DailyActivity(cards=activity.cards + cards_reviewed, xp=activity.xp)

    return progress.model_copy(update={
        "total_cards_reviewed": progress.total_cards_reviewed + cards_reviewed,
        "total_correct": progress.total_correct + correct_answers,
        "total_time_spent_ms": progress.total_time_spent_ms + time_spent_ms,
        "daily_activity": daily_activity,
    })


def update_cards_learned(progress: UserProgress, count: int) -> UserProgress:
    return progress.model_copy(update={"cards_learned": max(0, count)})
