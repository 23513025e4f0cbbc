"""
Study Session Service - drives streak, XP and achievements for one review session.

The session owns only transient counters; every durable change goes through
the Progress Store so it is persisted and synced like any other mutation.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel

from learner_progress.engines.achievements.engine import AchievementEngine
from learner_progress.engines.achievements.mastery import CardMasterySource, EmptyMasterySource
from learner_progress.engines.achievements.rules import AchievementContext
from learner_progress.engines.gamification import (
    XP_VALUES,
    StreakUpdate,
    add_xp,
    record_study_session,
    update_cards_learned,
    update_streak,
    xp_for_answer,
)
from learner_progress.engines.gamification.xp import day_key
from learner_progress.engines.progress.store import ProgressStore
from learner_progress.kernel.rounding import percentage
from learner_progress.logging_config import get_logger

logger = get_logger(__name__)

# SM-2 quality at or above this counts as a correct answer
CORRECT_QUALITY = 3
PERFECT_QUALITY = 5


class AnswerResult(BaseModel):
    """One reviewed card."""

    card_id: Optional[str] = None
    quality: int
    is_correct: bool
    xp_awarded: int


class SessionSummary(BaseModel):
    """What a finished session produced."""

    total_cards: int
    correct_answers: int
    accuracy: int
    xp_earned: int
    time_spent_ms: int
    perfect_streak: int
    best_perfect_streak: int
    daily_goal_reached: bool = False
    new_achievements: List[str] = []


class StudySession:
    """
    One review session.

    Usage:
        session = StudySession(store, achievement_engine, daily_goal=20)
        session.start_session()
        session.record_answer(5, card_id="gat")
        summary = session.end_session(mastery_source)
    """

    def __init__(
        self,
        store: ProgressStore,
        achievements: AchievementEngine,
        daily_goal: Optional[int] = None,
    ):
        self.store = store
        self.achievements = achievements
        self.daily_goal = daily_goal
        self.is_active = False
        self.results: List[AnswerResult] = []
        self.perfect_streak = 0
        self.best_perfect_streak = 0
        self._started_at: Optional[datetime] = None

    def start_session(self, today: Optional[date] = None) -> StreakUpdate:
        """Reset session counters and advance the daily streak."""
        today = today or self.store.today()
        self.is_active = True
        self.results = []
        self.perfect_streak = 0
        self.best_perfect_streak = 0
        self._started_at = self.store.now()

        update = update_streak(today, self.store.user)
        if update.changed:
            self.store.apply_user_progress(update.progress, reason="streak")
            if update.used_freeze:
                logger.info("Streak freeze used", extra={"streak": update.progress.current_streak})
        return update

    def record_answer(
        self,
        quality: int,
        card_id: Optional[str] = None,
        newly_learned: bool = False,
    ) -> AnswerResult:
        """
        Award XP for one review and track the run of perfect answers.
        newly_learned marks a card whose interval just reached mastery.
        """
        if not self.is_active:
            raise RuntimeError("No active study session")
        if not 0 <= quality <= 5:
            raise ValueError("quality must be between 0 and 5")

        award = add_xp(xp_for_answer(quality), self.store.user, self.store.today())
        progress = award.progress
        if newly_learned:
            progress = update_cards_learned(progress, progress.cards_learned + 1)
        self.store.apply_user_progress(progress, reason="xp")

        self.perfect_streak = self.perfect_streak + 1 if quality == PERFECT_QUALITY else 0
        self.best_perfect_streak = max(self.best_perfect_streak, self.perfect_streak)

        result = AnswerResult(
            card_id=card_id,
            quality=quality,
            is_correct=quality >= CORRECT_QUALITY,
            xp_awarded=award.awarded,
        )
        self.results.append(result)
        return result

    def end_session(
        self,
        mastery: Optional[CardMasterySource] = None,
        has_imported: bool = False,
    ) -> SessionSummary:
        """Record totals, pay the daily goal bonus once, and check achievements."""
        if not self.is_active:
            raise RuntimeError("No active study session")

        today = self.store.today()
        total = len(self.results)
        correct = sum(1 for r in self.results if r.is_correct)
        time_spent_ms = 0
        if self._started_at is not None:
            time_spent_ms = max(0, int((self.store.now() - self._started_at).total_seconds() * 1000))

        before = self.store.user.daily_activity.get(day_key(today))
        cards_before = before.cards if before else 0
        progress = record_study_session(self.store.user, total, correct, time_spent_ms, today)

        goal_reached = bool(
            self.daily_goal and cards_before < self.daily_goal <= cards_before + total
        )
        if goal_reached:
            progress = add_xp(XP_VALUES["daily_goal_bonus"], progress, today).progress
        self.store.apply_user_progress(progress, reason="study_session")

        context = AchievementContext(
            progress=self.store.user,
            mastery=mastery or EmptyMasterySource(),
            perfect_streak=self.best_perfect_streak,
            has_imported=has_imported,
        )
        unlocked = self.achievements.check_achievements(context)
        self.is_active = False

        summary = SessionSummary(
            total_cards=total,
            correct_answers=correct,
            accuracy=percentage(correct, total),
            xp_earned=sum(r.xp_awarded for r in self.results),
            time_spent_ms=time_spent_ms,
            perfect_streak=self.perfect_streak,
            best_perfect_streak=self.best_perfect_streak,
            daily_goal_reached=goal_reached,
            new_achievements=[a.id for a in unlocked],
        )
        logger.info(
            "Study session finished",
            extra={"cards": total, "xp_earned": summary.xp_earned, "new_achievements": summary.new_achievements},
        )
        return summary
