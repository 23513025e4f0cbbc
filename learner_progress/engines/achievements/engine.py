"""
Achievement Rule Engine - awards catalog achievements exactly once.
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel

from learner_progress.engines.achievements.catalog import ACHIEVEMENTS
from learner_progress.engines.achievements.rules import (
    AchievementContext,
    get_achievement_progress,
    is_requirement_met,
)
from learner_progress.engines.gamification.xp import add_xp
from learner_progress.engines.progress.store import ProgressStore
from learner_progress.logging_config import get_logger
from learner_progress.schemas.catalog import Achievement
from learner_progress.schemas.progress import UnlockedAchievement

logger = get_logger(__name__)


class AchievementStatus(BaseModel):
    """Catalog entry with its unlock state and progress."""

    achievement: Achievement
    unlocked: bool
    progress: int


class AchievementEngine:
    """
    Evaluates the catalog against a context and records new unlocks in the
    Progress Store. The store's unlocked set is the only memory of what has
    been awarded.
    """

    def __init__(self, store: ProgressStore, catalog: Optional[Sequence[Achievement]] = None):
        self.store = store
        self.catalog: List[Achievement] = list(catalog if catalog is not None else ACHIEVEMENTS)

    def check_achievements(self, context: AchievementContext) -> List[Achievement]:
        """
        Return achievements satisfied for the first time.

        Each one is recorded in the unlocked set and its xp_reward credited,
        so a repeated call with the same context returns [].
        """
        unlocked_ids = self.store.achievements.unlocked_ids()
        newly_unlocked = [
            achievement
            for achievement in self.catalog
            if achievement.id not in unlocked_ids
            and is_requirement_met(achievement.requirement, context)
        ]
        if not newly_unlocked:
            return []

        now = self.store.now()
        self.store.record_unlocked([
            UnlockedAchievement(achievement_id=achievement.id, unlocked_at=now)
            for achievement in newly_unlocked
        ])

        progress = self.store.user
        today = self.store.today()
        for achievement in newly_unlocked:
            if achievement.xp_reward > 0:
                progress = add_xp(achievement.xp_reward, progress, today).progress
        self.store.apply_user_progress(progress, reason="achievement_reward")

        logger.info(
            "Achievements unlocked",
            extra={"achievement_ids": [a.id for a in newly_unlocked]},
        )
        return newly_unlocked

    def get_progress(self, achievement: Achievement, context: AchievementContext) -> int:
        return get_achievement_progress(achievement, context)

    def statuses(self, context: AchievementContext) -> List[AchievementStatus]:
        unlocked_ids = self.store.achievements.unlocked_ids()
        return [
            AchievementStatus(
                achievement=achievement,
                unlocked=achievement.id in unlocked_ids,
                progress=self.get_progress(achievement, context),
            )
            for achievement in self.catalog
        ]
