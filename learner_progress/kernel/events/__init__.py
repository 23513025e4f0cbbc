"""
Event infrastructure.

Store mutations publish immutable events; effect layers subscribe.
"""

from learner_progress.kernel.events.event_bus import EventBus
from learner_progress.kernel.events.event_types import (
    AchievementUnlocked,
    BaseEvent,
    CurriculumStateChanged,
    DomainReplaced,
    DomainReset,
    LessonProgressChanged,
    PlacementCompleted,
    UserProgressChanged,
)

__all__ = [
    "EventBus",
    "AchievementUnlocked",
    "BaseEvent",
    "CurriculumStateChanged",
    "DomainReplaced",
    "DomainReset",
    "LessonProgressChanged",
    "PlacementCompleted",
    "UserProgressChanged",
]
