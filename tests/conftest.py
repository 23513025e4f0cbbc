"""
Pytest fixtures for learner progress tests.
"""

from datetime import date, datetime, timedelta, timezone
from typing import List

import pytest

from learner_progress.engines.achievements import AchievementEngine
from learner_progress.engines.curriculum import UnlockGraphResolver
from learner_progress.engines.progress import ProgressStore
from learner_progress.engines.sync import SyncCoordinator
from learner_progress.kernel.events import EventBus
from learner_progress.schemas.catalog import CurriculumLesson, CurriculumUnit, PlacementQuestion
from learner_progress.schemas.progress import CEFR_ORDER, CEFRLevel
from learner_progress.storage import InMemoryRemoteStore, MemoryStorage


class FixedClock:
    """Deterministic clock for the Progress Store."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)

    def set_day(self, day: date) -> None:
        self.current = datetime(day.year, day.month, day.day, 9, 0, tzinfo=timezone.utc)


# Monday
MONDAY = date(2024, 3, 4)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def sample_units() -> List[CurriculumUnit]:
    """Small A1/A2 graph: a1-basics -> a1-family -> a2-travel, a1-numbers standalone."""
    return [
        CurriculumUnit(
            id="a1-basics",
            title="Basics",
            level=CEFRLevel.A1,
            lessons=[
                CurriculumLesson(id="a1-basics-1", title="Greetings", xp_reward=20),
                CurriculumLesson(id="a1-basics-2", title="Introductions", xp_reward=20),
            ],
        ),
        CurriculumUnit(
            id="a1-family",
            title="Family",
            level=CEFRLevel.A1,
            prerequisites=["a1-basics"],
            lessons=[
                CurriculumLesson(id="a1-family-1", title="Relatives", xp_reward=25),
            ],
        ),
        CurriculumUnit(
            id="a1-numbers",
            title="Numbers",
            level=CEFRLevel.A1,
            lessons=[
                CurriculumLesson(id="a1-numbers-1", title="Counting", xp_reward=15),
            ],
        ),
        CurriculumUnit(
            id="a2-travel",
            title="Travel",
            level=CEFRLevel.A2,
            prerequisites=["a1-family"],
            lessons=[
                CurriculumLesson(id="a2-travel-1", title="At the station", xp_reward=30),
                CurriculumLesson(id="a2-travel-2", title="Hotels", xp_reward=30),
            ],
        ),
    ]


@pytest.fixture
def resolver(sample_units) -> UnlockGraphResolver:
    return UnlockGraphResolver(sample_units)


@pytest.fixture
def placement_questions() -> List[PlacementQuestion]:
    """Five questions per level; the correct answer is always 'a'."""
    return [
        PlacementQuestion(
            id=f"{level.value.lower()}-{i}",
            level=level,
            question=f"{level.value} question {i}",
            options=["a", "b", "c", "d"],
            correct_answer="a",
        )
        for level in CEFR_ORDER
        for i in range(1, 6)
    ]


@pytest.fixture
def store(storage, bus, clock, resolver) -> ProgressStore:
    return ProgressStore(storage, bus, lesson_to_unit=resolver.unit_for_lesson, clock=clock)


@pytest.fixture
def achievement_engine(store) -> AchievementEngine:
    return AchievementEngine(store)


@pytest.fixture
def remote() -> InMemoryRemoteStore:
    return InMemoryRemoteStore()


@pytest.fixture
def coordinator(store, remote):
    coordinator = SyncCoordinator(store, remote)
    yield coordinator
    coordinator.close()
