"""
Integration tests for sign-in merge and fire-and-forget remote pushes.

Uses the in-memory remote store so failures can be switched on per operation.
"""

from datetime import datetime, timezone

import pytest

from learner_progress.bootstrap import engine_lifespan
from learner_progress.config import Settings
from learner_progress.engines.achievements import AchievementContext
from learner_progress.engines.progress import lessons
from learner_progress.engines.sync import SyncCoordinator, SyncState
from learner_progress.schemas.progress import UserProgress
from learner_progress.schemas.snapshots import CurriculumSnapshot, Domain, GrammarSnapshot
from learner_progress.storage import InMemoryRemoteStore, MemoryStorage

EARLIER = datetime(2024, 3, 1, 18, 0, tzinfo=timezone.utc)


class ResettingFetchRemote(InMemoryRemoteStore):
    """Fetch of one domain dies with a socket error instead of RemoteUnavailable."""

    def __init__(self, broken: Domain):
        super().__init__()
        self.broken = broken

    async def fetch(self, domain, user_id):
        if domain == self.broken:
            raise ConnectionResetError("socket reset")
        return await super().fetch(domain, user_id)


def updates_for(remote: InMemoryRemoteStore, domain: Domain):
    return [call for call in remote.calls if call[0] == "update" and call[1] == domain.value]


def lesson_ids(document):
    return [pair[0] for pair in document["lesson_progress"]]


class TestSignInMerge:
    """Sign-in fetches, merges and bootstraps each domain."""

    @pytest.mark.asyncio
    async def test_empty_remote_is_bootstrapped_from_local(self, store, remote, coordinator):
        store.start_lesson("a1-basics-1")
        store.complete_lesson("a1-basics-1", 80)
        # Nothing is pushed before sign-in
        assert remote.calls == []

        await coordinator.sign_in("u1")

        doc = remote.get_document(Domain.CURRICULUM, "u1")
        assert lesson_ids(doc) == ["a1-basics-1"]
        assert "current_lesson_id" not in doc
        assert "placement_answers" not in doc
        for domain in Domain:
            assert coordinator.state(domain) == SyncState.SYNCED
            assert remote.get_document(domain, "u1") is not None

    @pytest.mark.asyncio
    async def test_remote_completion_merged_and_local_extra_pushed(self, store, remote, coordinator):
        remote_snapshot = CurriculumSnapshot(lesson_progress={
            "a1-basics-2": lessons.complete(None, "a1-basics-2", 95, EARLIER),
        })
        remote.put_document(Domain.CURRICULUM, "u1", remote_snapshot.to_remote())
        store.complete_lesson("a1-basics-1", 70)
        store.start_lesson("a1-basics-2")

        await coordinator.sign_in("u1")

        assert store.is_lesson_completed("a1-basics-1")
        assert store.is_lesson_completed("a1-basics-2")
        assert store.get_lesson_progress("a1-basics-2").score == 95
        # Local session field survives the merge
        assert store.curriculum.current_lesson_id == "a1-basics-2"

        pushed = remote.get_document(Domain.CURRICULUM, "u1")
        assert sorted(lesson_ids(pushed)) == ["a1-basics-1", "a1-basics-2"]

    @pytest.mark.asyncio
    async def test_unchanged_merge_does_not_push(self, store, remote, coordinator):
        remote_snapshot = GrammarSnapshot(lesson_progress={
            "g1": lessons.complete(None, "g1", 100, EARLIER),
        })
        remote.put_document(Domain.GRAMMAR, "u1", remote_snapshot.to_remote())

        await coordinator.sign_in("u1")

        assert store.is_lesson_completed("g1", Domain.GRAMMAR)
        assert updates_for(remote, Domain.GRAMMAR) == []

    @pytest.mark.asyncio
    async def test_fetch_failure_keeps_local_state(self, store, remote, coordinator):
        store.complete_lesson("a1-basics-1", 60)
        remote.fail("fetch")

        await coordinator.sign_in("u1")

        assert store.is_lesson_completed("a1-basics-1")
        assert coordinator.state(Domain.CURRICULUM) == SyncState.SYNCED
        assert updates_for(remote, Domain.CURRICULUM) == []

        # Later mutations are pushed once the remote recovers
        remote.recover()
        store.complete_lesson("a1-basics-2", 75)
        await coordinator.wait_for_pending()
        doc = remote.get_document(Domain.CURRICULUM, "u1")
        assert sorted(lesson_ids(doc)) == ["a1-basics-1", "a1-basics-2"]

    @pytest.mark.asyncio
    async def test_unexpected_fetch_error_does_not_stop_sign_in(self, store):
        remote = ResettingFetchRemote(Domain.GRAMMAR)
        coordinator = SyncCoordinator(store, remote)
        try:
            store.complete_exercise("g1", "e1", True)

            await coordinator.sign_in("u1")

            for domain in Domain:
                assert coordinator.state(domain) == SyncState.SYNCED
            assert store.is_lesson_completed("g1", Domain.GRAMMAR) is False
            assert lesson_ids(store.grammar.to_remote()) == ["g1"]
            assert remote.get_document(Domain.GRAMMAR, "u1") is None

            store.apply_user_progress(UserProgress(xp=30), reason="xp")
            await coordinator.wait_for_pending()
            assert remote.get_document(Domain.USER, "u1")["progress"]["xp"] == 30
        finally:
            coordinator.close()

    @pytest.mark.asyncio
    async def test_invalid_remote_document_ignored(self, store, remote, coordinator):
        store.apply_user_progress(UserProgress(xp=40), reason="test")
        remote.put_document(Domain.USER, "u1", {"progress": {"xp": -5}})

        await coordinator.sign_in("u1")

        assert store.user.xp == 40
        assert coordinator.state(Domain.USER) == SyncState.SYNCED

    @pytest.mark.asyncio
    async def test_switching_user_bootstraps_new_account(self, store, remote, coordinator):
        await coordinator.sign_in("u1")
        await coordinator.sign_in("u2")

        assert coordinator.user_id == "u2"
        assert remote.get_document(Domain.USER, "u2") is not None


class TestPushes:
    """Mutations after sign-in are pushed without blocking the caller."""

    @pytest.mark.asyncio
    async def test_mutation_pushes_domain(self, store, remote, coordinator):
        await coordinator.sign_in("u1")
        store.complete_exercise("g1", "e1", True)
        await coordinator.wait_for_pending()

        doc = remote.get_document(Domain.GRAMMAR, "u1")
        assert lesson_ids(doc) == ["g1"]
        assert "current_lesson" not in doc

    @pytest.mark.asyncio
    async def test_push_failure_is_swallowed(self, store, remote, coordinator):
        await coordinator.sign_in("u1")
        remote.fail("update")

        record = store.complete_lesson("a1-basics-1", 90)
        await coordinator.wait_for_pending()

        assert record.completed is True
        assert store.is_lesson_completed("a1-basics-1")
        assert coordinator.failed_pushes == 1
        assert coordinator.state(Domain.CURRICULUM) == SyncState.SYNCED

    @pytest.mark.asyncio
    async def test_achievement_unlock_reaches_remote(self, store, remote, coordinator, achievement_engine):
        await coordinator.sign_in("u1")

        unlocked = achievement_engine.check_achievements(
            AchievementContext(progress=UserProgress(total_cards_reviewed=1))
        )
        await coordinator.wait_for_pending()

        assert "first_card" in [a.id for a in unlocked]
        assert "first_card" in remote.unlocked["u1"]
        doc = remote.get_document(Domain.ACHIEVEMENTS, "u1")
        assert "first_card" in [entry["achievement_id"] for entry in doc["unlocked"]]
        # The XP reward was pushed with the user domain
        assert remote.get_document(Domain.USER, "u1")["progress"]["xp"] == store.user.xp > 0

    @pytest.mark.asyncio
    async def test_sign_out_stops_pushes(self, store, remote, coordinator):
        await coordinator.sign_in("u1")
        calls_before = len(remote.calls)

        coordinator.sign_out()
        store.complete_lesson("a1-basics-1", 100)
        await coordinator.wait_for_pending()

        assert len(remote.calls) == calls_before
        assert coordinator.state(Domain.CURRICULUM) == SyncState.UNINITIALIZED


class TestEngineLifespan:
    """Assembled engine from settings."""

    @pytest.mark.asyncio
    async def test_study_session_synced_through_lifespan(self, sample_units):
        remote = InMemoryRemoteStore()
        settings = Settings(remote_base_url="", log_level="WARNING")

        async with engine_lifespan(
            settings,
            units=sample_units,
            storage=MemoryStorage(),
            remote=remote,
        ) as engine:
            await engine.sync.sign_in("u1")
            session = engine.new_study_session(daily_goal=2)
            session.start_session()
            session.record_answer(5, card_id="gat")
            session.record_answer(5, card_id="gos")
            summary = session.end_session()

            assert summary.total_cards == 2
            assert summary.daily_goal_reached is True
            assert "first_card" in summary.new_achievements

            engine.store.start_lesson("a2-travel-1")
            assert engine.store.curriculum.current_unit_id == "a2-travel"

        # Pending pushes were drained on exit
        user_doc = remote.get_document(Domain.USER, "u1")
        assert user_doc["progress"]["xp"] == engine.store.user.xp
        assert user_doc["progress"]["total_cards_reviewed"] == 2
