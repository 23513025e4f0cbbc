"""
Event type definitions using Pydantic for validation.

Store mutations publish these after the new state has been persisted
locally; the sync layer turns them into remote pushes.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from learner_progress.schemas.snapshots import Domain


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseEvent(BaseModel):
    """Base event payload structure."""

    model_config = ConfigDict(extra="allow")

    domain: Domain
    timestamp: datetime = Field(default_factory=_utcnow)
    metadata: Dict[str, Any] = Field(default_factory=dict)


# Lesson Events

class LessonProgressChanged(BaseEvent):
    """A lesson record was created or ratcheted forward."""

    lesson_id: str
    action: str  # started, exercise, completed
    completed: bool = False
    score: int = 0


# Curriculum Events

class PlacementCompleted(BaseEvent):
    """A placement test was scored and the current level set."""

    level: str
    score: int


class CurriculumStateChanged(BaseEvent):
    """Current level or placement state changed without a lesson update."""

    reason: str


# User Events

class UserProgressChanged(BaseEvent):
    """XP, streak or study counters changed."""

    reason: str  # xp, streak, streak_freeze, study_session, cards_learned
    xp: int = 0
    level: int = 1
    current_streak: int = 0
    leveled_up: bool = False


# Achievement Events

class AchievementUnlocked(BaseEvent):
    """One or more achievements entered the unlocked set."""

    achievement_ids: List[str]


# Lifecycle Events

class DomainReset(BaseEvent):
    """A domain was explicitly reset to its empty state."""


class DomainReplaced(BaseEvent):
    """A domain was replaced by a merged snapshot during sign-in."""

    source: Optional[str] = None
