"""Unit tests for the unlock graph and placement scoring."""

from datetime import datetime, timezone

import pytest

from learner_progress.engines.curriculum import (
    UnlockGraphResolver,
    calculate_level,
    score_placement,
)
from learner_progress.engines.progress import lessons
from learner_progress.kernel.errors import CurriculumGraphError, UnknownUnitError
from learner_progress.schemas.catalog import CurriculumLesson, CurriculumUnit
from learner_progress.schemas.progress import CEFRLevel, LevelScore

TAKEN_AT = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


def completed(*lesson_ids):
    return {lid: lessons.complete(None, lid, 100, TAKEN_AT) for lid in lesson_ids}


def breakdown(a1, a2, b1, b2, total=5):
    return {
        CEFRLevel.A1: LevelScore(correct=a1, total=total),
        CEFRLevel.A2: LevelScore(correct=a2, total=total),
        CEFRLevel.B1: LevelScore(correct=b1, total=total),
        CEFRLevel.B2: LevelScore(correct=b2, total=total),
    }


class TestUnlockGraph:
    """Unit availability over the prerequisite DAG."""

    def test_unit_without_prerequisites_always_unlocked(self, resolver):
        assert resolver.is_unit_unlocked("a1-basics", {}) is True
        assert resolver.is_unit_unlocked("a1-basics", completed("a2-travel-1")) is True

    def test_unit_unlocked_once_prerequisite_completed(self, resolver):
        assert resolver.is_unit_unlocked("a1-family", {}) is False
        done = completed("a1-basics-1", "a1-basics-2")
        assert resolver.is_unit_unlocked("a1-family", done) is True
        # Queried against a snapshot where the prerequisite is incomplete
        assert resolver.is_unit_unlocked("a1-family", completed("a1-basics-1")) is False

    def test_only_direct_prerequisites_checked(self, resolver):
        # a1-family completed by a direct edit while a1-basics is not
        assert resolver.is_unit_unlocked("a2-travel", completed("a1-family-1")) is True

    def test_incomplete_record_does_not_count(self, resolver):
        progress = {"a1-basics-1": lessons.start(None, "a1-basics-1")}
        assert resolver.get_unit_progress("a1-basics", progress).completed == 0

    def test_unit_and_level_progress(self, resolver):
        done = completed("a1-basics-1", "a1-numbers-1")
        unit = resolver.get_unit_progress("a1-basics", done)
        assert (unit.completed, unit.total) == (1, 2)
        level = resolver.get_level_progress(CEFRLevel.A1, done)
        assert (level.completed, level.total) == (2, 4)

    def test_next_lesson_in_declaration_order(self, resolver):
        nxt = resolver.get_next_lesson(CEFRLevel.A1, {})
        assert (nxt.unit_id, nxt.lesson_id) == ("a1-basics", "a1-basics-1")

        nxt = resolver.get_next_lesson(CEFRLevel.A1, completed("a1-basics-1", "a1-basics-2"))
        assert nxt.lesson_id == "a1-family-1"

    def test_next_lesson_skips_locked_units(self, resolver):
        nxt = resolver.get_next_lesson(CEFRLevel.A1, completed("a1-basics-1", "a1-basics-2", "a1-family-1"))
        assert nxt.lesson_id == "a1-numbers-1"

    def test_next_lesson_starts_at_current_level(self, resolver):
        # a2-travel is locked and lower levels are not scanned
        assert resolver.get_next_lesson(CEFRLevel.A2, {}) is None
        nxt = resolver.get_next_lesson(CEFRLevel.A2, completed("a1-family-1"))
        assert nxt.lesson_id == "a2-travel-1"

    def test_next_lesson_none_when_all_done(self, resolver, sample_units):
        everything = completed(*[l.id for u in sample_units for l in u.lessons])
        assert resolver.get_next_lesson(CEFRLevel.A1, everything) is None

    def test_total_xp_earned(self, resolver):
        assert resolver.get_total_xp_earned(completed("a1-basics-1", "a2-travel-2")) == 50

    def test_unit_for_lesson(self, resolver):
        assert resolver.unit_for_lesson("a2-travel-2") == "a2-travel"
        assert resolver.unit_for_lesson("missing") is None

    def test_unknown_unit_raises(self, resolver):
        with pytest.raises(UnknownUnitError):
            resolver.is_unit_unlocked("nope", {})

    def test_unknown_prerequisite_rejected(self):
        with pytest.raises(CurriculumGraphError):
            UnlockGraphResolver([
                CurriculumUnit(id="u1", level=CEFRLevel.A1, prerequisites=["ghost"]),
            ])

    def test_cycle_rejected(self):
        with pytest.raises(CurriculumGraphError, match="cycle"):
            UnlockGraphResolver([
                CurriculumUnit(id="u1", level=CEFRLevel.A1, prerequisites=["u3"],
                               lessons=[CurriculumLesson(id="l1")]),
                CurriculumUnit(id="u2", level=CEFRLevel.A1, prerequisites=["u1"]),
                CurriculumUnit(id="u3", level=CEFRLevel.A1, prerequisites=["u2"]),
            ])


class TestPlacement:
    """Placement level decision and scoring."""

    def test_b1_example(self):
        assert calculate_level(breakdown(5, 5, 3, 0)) == CEFRLevel.B1

    def test_a1_example(self):
        assert calculate_level(breakdown(5, 2, 1, 0)) == CEFRLevel.A1

    def test_b2_wins_even_if_a2_failed(self):
        assert calculate_level(breakdown(5, 1, 0, 3)) == CEFRLevel.B2

    def test_score_placement_counts_per_level(self, placement_questions):
        answers = {q.id: "a" for q in placement_questions if q.level != CEFRLevel.B2}
        answers["b2-1"] = "a"
        result = score_placement(answers, placement_questions, TAKEN_AT)
        assert result.level == CEFRLevel.B1
        assert result.correct_answers == 16
        assert result.total_questions == 20
        assert result.score == 80
        assert result.breakdown[CEFRLevel.B2] == LevelScore(correct=1, total=5)

    def test_score_placement_is_deterministic(self, placement_questions):
        answers = {"a1-1": "a", "a2-2": "b", "b1-3": "a"}
        first = score_placement(answers, placement_questions, TAKEN_AT)
        second = score_placement(dict(answers), placement_questions, TAKEN_AT)
        assert first == second

    def test_empty_bank(self):
        result = score_placement({}, [], TAKEN_AT)
        assert result.level == CEFRLevel.A1
        assert result.score == 0
