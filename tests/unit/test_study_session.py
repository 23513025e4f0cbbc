"""Unit tests for the StudySession service."""

import pytest

from learner_progress.services import StudySession


@pytest.fixture
def session(store, achievement_engine) -> StudySession:
    return StudySession(store, achievement_engine, daily_goal=3)


class TestStudySession:
    """Session checkpoints write through the store."""

    def test_answer_requires_active_session(self, session):
        with pytest.raises(RuntimeError):
            session.record_answer(5)

    def test_quality_out_of_range_rejected(self, session):
        session.start_session()
        with pytest.raises(ValueError):
            session.record_answer(6)

    def test_start_session_begins_streak(self, session, store):
        update = session.start_session()
        assert update.changed is True
        assert store.user.current_streak == 1

    def test_perfect_run_tracked(self, session):
        session.start_session()
        for quality in (5, 5, 2, 5):
            session.record_answer(quality)
        assert session.perfect_streak == 1
        assert session.best_perfect_streak == 2

    def test_newly_learned_card_counted(self, session, store):
        session.start_session()
        session.record_answer(5, card_id="gat", newly_learned=True)
        session.record_answer(4, card_id="gos")
        session.record_answer(5, card_id="casa", newly_learned=True)
        assert store.user.cards_learned == 2

    def test_end_session_summary(self, session, store):
        session.start_session()
        session.record_answer(5, card_id="gat")
        session.record_answer(1, card_id="gos")
        summary = session.end_session()

        assert summary.total_cards == 2
        assert summary.correct_answers == 1
        assert summary.accuracy == 50
        assert summary.daily_goal_reached is False
        assert "first_card" in summary.new_achievements
        assert store.user.total_cards_reviewed == 2
        assert session.is_active is False
