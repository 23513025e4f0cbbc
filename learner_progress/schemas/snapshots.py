"""
Per-domain snapshots: the unit of local persistence and of remote sync.

Each snapshot dumps to a JSON-safe document. Session-only fields (the lesson
currently open, placement answers in flight) are persisted locally but never
pushed to or merged from the remote store.
"""

from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Set, Type

from pydantic import BaseModel, Field, field_serializer, field_validator

from learner_progress.schemas.progress import (
    CEFRLevel,
    LessonProgress,
    PlacementResult,
    UnlockedAchievement,
    UserProgress,
    dict_to_pairs,
    pairs_to_dict,
)


class Domain(str, Enum):
    """One logical remote document per domain."""
    CURRICULUM = "curriculum"
    GRAMMAR = "grammar"
    USER = "user"
    ACHIEVEMENTS = "achievements"


STORE_NAMES: Dict[Domain, str] = {
    Domain.CURRICULUM: "learner-curriculum",
    Domain.GRAMMAR: "learner-grammar",
    Domain.USER: "learner-user",
    Domain.ACHIEVEMENTS: "learner-achievements",
}


class DomainSnapshot(BaseModel):
    """Base class for domain snapshots."""

    local_only_fields: ClassVar[FrozenSet[str]] = frozenset()

    def to_document(self) -> Dict[str, Any]:
        """Full JSON-safe document for local persistence."""
        return self.model_dump(mode="json")

    def to_remote(self) -> Dict[str, Any]:
        """JSON-safe document without session-only fields."""
        return self.model_dump(mode="json", exclude=set(self.local_only_fields))

    def same_remote_content(self, other: "DomainSnapshot") -> bool:
        """Compare synced fields as values; map key order is not content."""
        exclude = set(self.local_only_fields)
        return self.model_dump(exclude=exclude) == other.model_dump(exclude=exclude)


def _parse_lesson_map(value: Any) -> Any:
    return pairs_to_dict(value)


def _dump_lesson_map(value: Dict[str, LessonProgress]) -> List[List[Any]]:
    return [[lesson_id, record.model_dump(mode="json")] for lesson_id, record in value.items()]


class CurriculumSnapshot(DomainSnapshot):
    """Structured learning path: lessons, current level and placement."""

    local_only_fields: ClassVar[FrozenSet[str]] = frozenset({
        "placement_answers",
        "placement_in_progress",
        "current_unit_id",
        "current_lesson_id",
    })

    lesson_progress: Dict[str, LessonProgress] = Field(default_factory=dict)
    current_level: CEFRLevel = CEFRLevel.A1
    placement_result: Optional[PlacementResult] = None
    placement_answers: Dict[str, str] = Field(default_factory=dict)
    placement_in_progress: bool = False
    current_unit_id: Optional[str] = None
    current_lesson_id: Optional[str] = None

    @field_validator("lesson_progress", "placement_answers", mode="before")
    @classmethod
    def _parse_maps(cls, value: Any) -> Any:
        return pairs_to_dict(value)

    @field_serializer("lesson_progress", when_used="json")
    def _serialize_lessons(self, value: Dict[str, LessonProgress]) -> List[List[Any]]:
        return _dump_lesson_map(value)

    @field_serializer("placement_answers", when_used="json")
    def _serialize_answers(self, value: Dict[str, str]) -> List[List[Any]]:
        return dict_to_pairs(value)


class GrammarSnapshot(DomainSnapshot):
    """Grammar lessons with exercise-level outcomes."""

    local_only_fields: ClassVar[FrozenSet[str]] = frozenset({"current_lesson"})

    lesson_progress: Dict[str, LessonProgress] = Field(default_factory=dict)
    current_lesson: Optional[str] = None

    @field_validator("lesson_progress", mode="before")
    @classmethod
    def _parse_lessons(cls, value: Any) -> Any:
        return pairs_to_dict(value)

    @field_serializer("lesson_progress", when_used="json")
    def _serialize_lessons(self, value: Dict[str, LessonProgress]) -> List[List[Any]]:
        return _dump_lesson_map(value)


class UserSnapshot(DomainSnapshot):
    """XP, streak and study counters."""

    progress: UserProgress = Field(default_factory=UserProgress)

    def is_pristine(self) -> bool:
        """True when nothing has been recorded locally yet."""
        return self.progress == UserProgress()


class AchievementsSnapshot(DomainSnapshot):
    """Unlocked achievements. Ids are unique."""

    unlocked: List[UnlockedAchievement] = Field(default_factory=list)

    def unlocked_ids(self) -> Set[str]:
        return {entry.achievement_id for entry in self.unlocked}


SNAPSHOT_TYPES: Dict[Domain, Type[DomainSnapshot]] = {
    Domain.CURRICULUM: CurriculumSnapshot,
    Domain.GRAMMAR: GrammarSnapshot,
    Domain.USER: UserSnapshot,
    Domain.ACHIEVEMENTS: AchievementsSnapshot,
}
