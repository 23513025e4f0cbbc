"""
Sync Coordinator - sign-in merge and best-effort remote pushes.

Per domain: UNINITIALIZED -> MERGING -> SYNCED, with SYNCED re-entered after
every push attempt. Remote failures are logged and dropped here; local state
stays authoritative for the session and is reconciled again at next sign-in.
"""

import asyncio
from enum import Enum
from typing import Any, Dict, Optional, Set, Tuple

from pydantic import ValidationError

from learner_progress.engines.progress.store import ProgressStore
from learner_progress.engines.sync.merge import merge_domain
from learner_progress.kernel.errors import RemoteUnavailable
from learner_progress.kernel.events import AchievementUnlocked, BaseEvent, DomainReplaced
from learner_progress.logging_config import get_logger, user_id_var
from learner_progress.schemas.snapshots import SNAPSHOT_TYPES, Domain
from learner_progress.storage.remote import RemoteStore

logger = get_logger(__name__)


class SyncState(str, Enum):
    UNINITIALIZED = "uninitialized"
    MERGING = "merging"
    SYNCED = "synced"


_TRANSITIONS: Set[Tuple[SyncState, SyncState]] = {
    (SyncState.UNINITIALIZED, SyncState.MERGING),
    (SyncState.MERGING, SyncState.SYNCED),
    (SyncState.SYNCED, SyncState.SYNCED),
    # sign-out or re-sign-in
    (SyncState.MERGING, SyncState.UNINITIALIZED),
    (SyncState.SYNCED, SyncState.UNINITIALIZED),
}


def can_transition(from_state: SyncState, to_state: SyncState) -> bool:
    return (from_state, to_state) in _TRANSITIONS


class SyncCoordinator:
    """
    Wraps a ProgressStore with remote persistence.

    Subscribes to the store's event bus; every mutation published while the
    domain is SYNCED schedules a fire-and-forget push of that domain.
    """

    def __init__(self, store: ProgressStore, remote: RemoteStore):
        self.store = store
        self.remote = remote
        self.user_id: Optional[str] = None
        self.failed_pushes = 0
        self._states: Dict[Domain, SyncState] = {domain: SyncState.UNINITIALIZED for domain in Domain}
        self._pending: Set[asyncio.Task] = set()
        self._last_pushed: Dict[Domain, Dict[str, Any]] = {}
        self._unsubscribe = store.bus.subscribe(self.handle_event)

    def state(self, domain: Domain) -> SyncState:
        return self._states[Domain(domain)]

    def _transition(self, domain: Domain, to_state: SyncState) -> None:
        from_state = self._states[domain]
        if not can_transition(from_state, to_state):
            raise RuntimeError(
                f"Invalid sync transition for {domain.value}: {from_state.value} -> {to_state.value}"
            )
        self._states[domain] = to_state

    # ------------------------------------------------------------------
    # Sign-in / sign-out
    # ------------------------------------------------------------------

    async def sign_in(self, user_id: str) -> None:
        """Merge every domain with the remote copy for user_id."""
        if self.user_id is not None:
            self.sign_out()
        self.user_id = user_id
        user_id_var.set(user_id)
        logger.info("Sign-in sync started")

        for domain in Domain:
            await self._sync_domain(domain, user_id)

        logger.info("Sign-in sync finished")

    async def _sync_domain(self, domain: Domain, user_id: str) -> None:
        self._transition(domain, SyncState.MERGING)
        try:
            document = await self.remote.fetch(domain, user_id)
        except RemoteUnavailable as e:
            logger.warning(
                "Remote fetch failed, keeping local state",
                extra={"domain": domain.value, "error": str(e)},
            )
            self._finish_merge(domain, user_id)
            return
        except Exception:
            logger.exception("Remote fetch raised, keeping local state", extra={"domain": domain.value})
            self._finish_merge(domain, user_id)
            return

        if self.user_id != user_id:
            return

        local = self.store.snapshot(domain)
        if document is None:
            # First sync for this user: the remote copy is bootstrapped from local
            self._finish_merge(domain, user_id)
            await self._push(domain, user_id, local.to_remote())
            return

        try:
            remote = SNAPSHOT_TYPES[domain].model_validate(document)
        except ValidationError as e:
            logger.warning(
                "Remote document is invalid, keeping local state",
                extra={"domain": domain.value, "errors": e.error_count()},
            )
            self._finish_merge(domain, user_id)
            return

        outcome = merge_domain(domain, local, remote)
        self.store.replace_domain(domain, outcome.merged)
        self._last_pushed[domain] = remote.to_remote()
        self._finish_merge(domain, user_id)
        logger.info(
            "Merged remote snapshot",
            extra={"domain": domain.value, "changed": outcome.changed_vs_remote},
        )
        if outcome.changed_vs_remote:
            await self._push(domain, user_id, outcome.merged.to_remote())

    def _finish_merge(self, domain: Domain, user_id: str) -> None:
        if self.user_id == user_id and self._states[domain] == SyncState.MERGING:
            self._transition(domain, SyncState.SYNCED)

    def sign_out(self) -> None:
        """Stop pushing. In-flight pushes are left to finish."""
        for domain in Domain:
            if self._states[domain] != SyncState.UNINITIALIZED:
                self._transition(domain, SyncState.UNINITIALIZED)
        self._last_pushed.clear()
        self.user_id = None
        user_id_var.set(None)

    def close(self) -> None:
        self.sign_out()
        self._unsubscribe()

    async def wait_for_pending(self) -> None:
        """Await every scheduled push."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------------------------------------------------------------
    # Pushes
    # ------------------------------------------------------------------

    def handle_event(self, event: BaseEvent) -> None:
        """Bus subscriber: schedule pushes for a mutation."""
        if isinstance(event, DomainReplaced) or self.user_id is None:
            return
        domain = event.domain
        if self._states[domain] != SyncState.SYNCED:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop, push skipped", extra={"domain": domain.value})
            return

        payload = self.store.snapshot(domain).to_remote()
        self._schedule(loop, self._push(domain, self.user_id, payload))

        if isinstance(event, AchievementUnlocked):
            for achievement_id in event.achievement_ids:
                self._schedule(loop, self._unlock(self.user_id, achievement_id))

    def _schedule(self, loop: asyncio.AbstractEventLoop, coro) -> None:
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _push(self, domain: Domain, user_id: str, payload: Dict[str, Any]) -> None:
        if self._last_pushed.get(domain) == payload:
            return
        try:
            await self.remote.update(domain, user_id, payload)
            self._last_pushed[domain] = payload
        except RemoteUnavailable as e:
            self.failed_pushes += 1
            logger.warning("Remote push failed", extra={"domain": domain.value, "error": str(e)})
        except Exception:
            self.failed_pushes += 1
            logger.exception("Remote push raised", extra={"domain": domain.value})
        finally:
            if self.user_id == user_id and self._states[domain] == SyncState.SYNCED:
                self._transition(domain, SyncState.SYNCED)

    async def _unlock(self, user_id: str, achievement_id: str) -> None:
        try:
            await self.remote.unlock_achievement(user_id, achievement_id)
        except RemoteUnavailable as e:
            self.failed_pushes += 1
            logger.warning(
                "Remote achievement unlock failed",
                extra={"achievement_id": achievement_id, "error": str(e)},
            )
        except Exception:
            self.failed_pushes += 1
            logger.exception("Remote achievement unlock raised", extra={"achievement_id": achievement_id})
