"""
Unlock Graph Resolver - unit availability over the prerequisite DAG.

The resolver holds only the static graph. Every query is evaluated against a
lesson-progress mapping passed in by the caller, so results always reflect
the snapshot they were asked about.
"""

from typing import Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel

from learner_progress.kernel.errors import CurriculumGraphError, UnknownUnitError
from learner_progress.schemas.catalog import CurriculumUnit
from learner_progress.schemas.progress import CEFR_ORDER, CEFRLevel, LessonProgress, UnitProgress

LessonMap = Mapping[str, LessonProgress]


class NextLesson(BaseModel):
    """Where the learner should continue."""

    unit_id: str
    lesson_id: str


def _is_done(lesson_progress: LessonMap, lesson_id: str) -> bool:
    record = lesson_progress.get(lesson_id)
    return bool(record and record.completed)


class UnlockGraphResolver:
    """Prerequisite DAG over curriculum units, in declaration order."""

    def __init__(self, units: Sequence[CurriculumUnit]):
        self.units: List[CurriculumUnit] = list(units)
        self._by_id: Dict[str, CurriculumUnit] = {}
        self._unit_for_lesson: Dict[str, str] = {}

        for unit in self.units:
            if unit.id in self._by_id:
                raise CurriculumGraphError(f"Duplicate unit id: {unit.id}")
            self._by_id[unit.id] = unit
            for lesson in unit.lessons:
                self._unit_for_lesson.setdefault(lesson.id, unit.id)

        self._validate()

    def _validate(self) -> None:
        for unit in self.units:
            for prereq in unit.prerequisites:
                if prereq not in self._by_id:
                    raise CurriculumGraphError(
                        f"Unit '{unit.id}' requires unknown unit '{prereq}'"
                    )

        # Three-color DFS; a grey node seen again closes a cycle
        white, grey, black = 0, 1, 2
        color = {unit_id: white for unit_id in self._by_id}

        def visit(unit_id: str, path: List[str]) -> None:
            color[unit_id] = grey
            for prereq in self._by_id[unit_id].prerequisites:
                if color[prereq] == grey:
                    cycle = path[path.index(prereq):] + [prereq]
                    raise CurriculumGraphError(f"Prerequisite cycle: {' -> '.join(cycle)}")
                if color[prereq] == white:
                    visit(prereq, path + [prereq])
            color[unit_id] = black

        for unit in self.units:
            if color[unit.id] == white:
                visit(unit.id, [unit.id])

    def get_unit(self, unit_id: str) -> CurriculumUnit:
        try:
            return self._by_id[unit_id]
        except KeyError:
            raise UnknownUnitError(unit_id) from None

    def unit_for_lesson(self, lesson_id: str) -> Optional[str]:
        return self._unit_for_lesson.get(lesson_id)

    def units_for_level(self, level: CEFRLevel) -> List[CurriculumUnit]:
        return [unit for unit in self.units if unit.level == level]

    def is_unit_completed(self, unit_id: str, lesson_progress: LessonMap) -> bool:
        unit = self.get_unit(unit_id)
        return all(_is_done(lesson_progress, lesson.id) for lesson in unit.lessons)

    def is_unit_unlocked(self, unit_id: str, lesson_progress: LessonMap) -> bool:
        """
        Unlocked when every direct prerequisite is completed. Whether the
        prerequisites were themselves unlocked is not checked.
        """
        unit = self.get_unit(unit_id)
        return all(self.is_unit_completed(prereq, lesson_progress) for prereq in unit.prerequisites)

    def get_unit_progress(self, unit_id: str, lesson_progress: LessonMap) -> UnitProgress:
        unit = self.get_unit(unit_id)
        completed = sum(1 for lesson in unit.lessons if _is_done(lesson_progress, lesson.id))
        return UnitProgress(completed=completed, total=len(unit.lessons))

    def get_level_progress(self, level: CEFRLevel, lesson_progress: LessonMap) -> UnitProgress:
        completed = 0
        total = 0
        for unit in self.units_for_level(level):
            for lesson in unit.lessons:
                total += 1
                if _is_done(lesson_progress, lesson.id):
                    completed += 1
        return UnitProgress(completed=completed, total=total)

    def get_next_lesson(
        self,
        current_level: CEFRLevel,
        lesson_progress: LessonMap,
    ) -> Optional[NextLesson]:
        """
        First incomplete lesson of an unlocked unit, scanning levels from
        current_level upwards, then units and lessons in declaration order.
        """
        start = CEFR_ORDER.index(CEFRLevel(current_level))
        for level in CEFR_ORDER[start:]:
            for unit in self.units_for_level(level):
                if not self.is_unit_unlocked(unit.id, lesson_progress):
                    continue
                for lesson in unit.lessons:
                    if not _is_done(lesson_progress, lesson.id):
                        return NextLesson(unit_id=unit.id, lesson_id=lesson.id)
        return None

    def get_total_xp_earned(self, lesson_progress: LessonMap) -> int:
        return sum(
            lesson.xp_reward
            for unit in self.units
            for lesson in unit.lessons
            if _is_done(lesson_progress, lesson.id)
        )
