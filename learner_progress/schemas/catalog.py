"""
Pydantic schemas for static content consumed by the engine:
curriculum units, placement questions and the achievement catalog.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from learner_progress.schemas.progress import CEFRLevel


class CurriculumLesson(BaseModel):
    """A lesson inside a curriculum unit."""

    id: str
    title: str = ""
    xp_reward: int = 0
    estimated_minutes: int = 10


class CurriculumUnit(BaseModel):
    """A unit node in the prerequisite graph."""

    id: str
    title: str = ""
    level: CEFRLevel
    prerequisites: List[str] = []
    lessons: List[CurriculumLesson] = []
    milestone_title: Optional[str] = None

    @property
    def lesson_ids(self) -> List[str]:
        return [lesson.id for lesson in self.lessons]


class PlacementQuestion(BaseModel):
    """One leveled placement-test question."""

    id: str
    level: CEFRLevel
    question: str = ""
    options: List[str] = []
    correct_answer: str


# Achievement requirements - closed tagged variant

class StreakRequirement(BaseModel):
    type: Literal["streak"] = "streak"
    days: int = Field(gt=0)


class CardsReviewedRequirement(BaseModel):
    type: Literal["cards_reviewed"] = "cards_reviewed"
    count: int = Field(gt=0)


class CardsMasteredRequirement(BaseModel):
    type: Literal["cards_mastered"] = "cards_mastered"
    count: int = Field(gt=0)


class PerfectStreakRequirement(BaseModel):
    type: Literal["perfect_streak"] = "perfect_streak"
    count: int = Field(gt=0)


class LevelRequirement(BaseModel):
    type: Literal["level"] = "level"
    level: int = Field(gt=0)


class XPRequirement(BaseModel):
    type: Literal["xp"] = "xp"
    amount: int = Field(gt=0)


class FirstActionRequirement(BaseModel):
    type: Literal["first_action"] = "first_action"
    action: str  # "review" or "import"


class CategoryMasteredRequirement(BaseModel):
    type: Literal["category_mastered"] = "category_mastered"
    category: str


AchievementRequirement = Annotated[
    Union[
        StreakRequirement,
        CardsReviewedRequirement,
        CardsMasteredRequirement,
        PerfectStreakRequirement,
        LevelRequirement,
        XPRequirement,
        FirstActionRequirement,
        CategoryMasteredRequirement,
    ],
    Field(discriminator="type"),
]


class AchievementCategory(str, Enum):
    STREAK = "streak"
    MASTERY = "mastery"
    SPEED = "speed"
    DEDICATION = "dedication"
    SPECIAL = "special"


class AchievementRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class Achievement(BaseModel):
    """A catalog entry with its unlock requirement and XP reward."""

    id: str
    name: str
    description: str = ""
    icon: str = ""
    category: AchievementCategory
    requirement: AchievementRequirement
    xp_reward: int = 0
    rarity: AchievementRarity = AchievementRarity.COMMON
