"""
Pydantic schemas for learner progress records.

Map-typed fields are written as ordered [key, value] pair lists and
date-typed fields as ISO-8601 strings when dumped in JSON mode; the
matching validators rebuild dicts and date values on load.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from learner_progress.kernel.levels import level_for_xp


class CEFRLevel(str, Enum):
    """Proficiency buckets used by units and placement questions."""
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"


# Easiest to hardest
CEFR_ORDER: List[CEFRLevel] = [CEFRLevel.A1, CEFRLevel.A2, CEFRLevel.B1, CEFRLevel.B2]


def pairs_to_dict(value: Any) -> Any:
    """Rebuild a mapping from a [[key, value], ...] list. Dicts pass through."""
    if isinstance(value, list):
        result = {}
        for item in value:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                raise ValueError("expected [key, value] pairs")
            result[item[0]] = item[1]
        return result
    return value


def dict_to_pairs(value: Dict[Any, Any]) -> List[List[Any]]:
    """Serialize a mapping as an ordered [[key, value], ...] list."""
    return [[key.value if isinstance(key, Enum) else key, item] for key, item in value.items()]


def parse_iso_datetime(value: Any) -> Any:
    if isinstance(value, str):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    return value


def parse_iso_date(value: Any) -> Any:
    if isinstance(value, str):
        # Accept full timestamps written by older clients
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date() if "T" in value else date.fromisoformat(value)
    if isinstance(value, datetime):
        return value.date()
    return value


class LessonProgress(BaseModel):
    """Progress on one lesson. completed and score only ever move forward."""

    lesson_id: str
    completed: bool = False
    completed_at: Optional[datetime] = None
    score: int = Field(default=0, ge=0, le=100)
    attempts: int = Field(default=0, ge=0)
    exercise_scores: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("completed_at", mode="before")
    @classmethod
    def _parse_completed_at(cls, value: Any) -> Any:
        return parse_iso_datetime(value)

    @field_validator("exercise_scores", mode="before")
    @classmethod
    def _parse_exercise_scores(cls, value: Any) -> Any:
        return pairs_to_dict(value)

    @field_serializer("completed_at", when_used="json")
    def _serialize_completed_at(self, value: Optional[datetime]) -> Optional[str]:
        return value.isoformat() if value else None

    @field_serializer("exercise_scores", when_used="json")
    def _serialize_exercise_scores(self, value: Dict[str, bool]) -> List[List[Any]]:
        return dict_to_pairs(value)

    @model_validator(mode="after")
    def _completed_has_timestamp(self) -> "LessonProgress":
        if self.completed and self.completed_at is None:
            raise ValueError("completed lesson requires completed_at")
        return self


class UnitProgress(BaseModel):
    """Derived count of completed lessons in a unit (or level)."""

    completed: int = 0
    total: int = 0


class LevelScore(BaseModel):
    """Correct/total tally for one CEFR bucket."""

    correct: int = 0
    total: int = 0


class PlacementResult(BaseModel):
    """Outcome of a placement test. Replaced wholesale on retake."""

    model_config = ConfigDict(frozen=True)

    level: CEFRLevel
    score: int = Field(ge=0, le=100)
    total_questions: int
    correct_answers: int
    taken_at: datetime
    breakdown: Dict[CEFRLevel, LevelScore]

    @field_validator("taken_at", mode="before")
    @classmethod
    def _parse_taken_at(cls, value: Any) -> Any:
        return parse_iso_datetime(value)

    @field_validator("breakdown", mode="before")
    @classmethod
    def _parse_breakdown(cls, value: Any) -> Any:
        return pairs_to_dict(value)

    @field_serializer("taken_at", when_used="json")
    def _serialize_taken_at(self, value: datetime) -> str:
        return value.isoformat()

    @field_serializer("breakdown", when_used="json")
    def _serialize_breakdown(self, value: Dict[CEFRLevel, LevelScore]) -> List[List[Any]]:
        return [[level.value, score.model_dump()] for level, score in value.items()]


class DailyActivity(BaseModel):
    """Cards reviewed and XP earned on one calendar day."""

    cards: int = 0
    xp: int = 0


class UserProgress(BaseModel):
    """XP, level, streak and study totals for the signed-in learner."""

    xp: int = Field(default=0, ge=0)
    level: int = Field(default=1, ge=1)
    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_study_date: Optional[date] = None
    total_cards_reviewed: int = 0
    total_correct: int = 0
    total_time_spent_ms: int = 0
    cards_learned: int = 0
    streak_freeze_available: bool = True
    last_streak_freeze_used: Optional[date] = None
    daily_activity: Dict[str, DailyActivity] = Field(default_factory=dict)

    @field_validator("last_study_date", "last_streak_freeze_used", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> Any:
        return parse_iso_date(value)

    @field_validator("daily_activity", mode="before")
    @classmethod
    def _parse_daily_activity(cls, value: Any) -> Any:
        return pairs_to_dict(value)

    @field_serializer("last_study_date", "last_streak_freeze_used", when_used="json")
    def _serialize_dates(self, value: Optional[date]) -> Optional[str]:
        return value.isoformat() if value else None

    @field_serializer("daily_activity", when_used="json")
    def _serialize_daily_activity(self, value: Dict[str, DailyActivity]) -> List[List[Any]]:
        return [[day, activity.model_dump()] for day, activity in value.items()]

    @model_validator(mode="after")
    def _level_follows_xp(self) -> "UserProgress":
        # level is never trusted from input
        self.level = level_for_xp(self.xp)
        return self


class UnlockedAchievement(BaseModel):
    """An achievement id and when it was first unlocked."""

    achievement_id: str
    unlocked_at: datetime

    @field_validator("unlocked_at", mode="before")
    @classmethod
    def _parse_unlocked_at(cls, value: Any) -> Any:
        return parse_iso_datetime(value)

    @field_serializer("unlocked_at", when_used="json")
    def _serialize_unlocked_at(self, value: datetime) -> str:
        return value.isoformat()
