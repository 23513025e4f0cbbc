"""
Engine assembly - wires storage, store, sync and engines from Settings.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional, Sequence

from learner_progress.config import Settings, get_settings
from learner_progress.engines.achievements import AchievementEngine
from learner_progress.engines.curriculum import UnlockGraphResolver
from learner_progress.engines.progress import ProgressStore
from learner_progress.engines.sync import SyncCoordinator
from learner_progress.kernel.events import EventBus
from learner_progress.logging_config import configure_logging, get_logger
from learner_progress.schemas.catalog import Achievement, CurriculumUnit
from learner_progress.services import StudySession
from learner_progress.storage import (
    HttpRemoteStore,
    LocalStorage,
    NullRemoteStore,
    RemoteStore,
    SnapshotCodec,
    SqlStorage,
)

logger = get_logger(__name__)


class ProgressEngine:
    """All collaborators for one learner on one device."""

    def __init__(
        self,
        settings: Settings,
        storage: LocalStorage,
        remote: RemoteStore,
        units: Sequence[CurriculumUnit] = (),
        catalog: Optional[Sequence[Achievement]] = None,
    ):
        self.settings = settings
        self.storage = storage
        self.remote = remote
        self.bus = EventBus()
        self.curriculum = UnlockGraphResolver(units)
        self.store = ProgressStore(
            storage,
            self.bus,
            codec=SnapshotCodec(current_version=settings.storage_schema_version),
            lesson_to_unit=self.curriculum.unit_for_lesson,
        )
        self.sync = SyncCoordinator(self.store, remote)
        self.achievements = AchievementEngine(self.store, catalog)

    def new_study_session(self, daily_goal: Optional[int] = None) -> StudySession:
        return StudySession(self.store, self.achievements, daily_goal=daily_goal)

    async def aclose(self) -> None:
        await self.sync.wait_for_pending()
        self.sync.close()
        await self.remote.aclose()
        self.storage.close()


def build_remote(settings: Settings) -> RemoteStore:
    if settings.demo_mode:
        return NullRemoteStore()
    return HttpRemoteStore(
        settings.remote_base_url,
        api_token=settings.remote_api_token,
        timeout=settings.remote_timeout_seconds,
    )


def build_engine(
    settings: Optional[Settings] = None,
    *,
    units: Sequence[CurriculumUnit] = (),
    catalog: Optional[Sequence[Achievement]] = None,
    storage: Optional[LocalStorage] = None,
    remote: Optional[RemoteStore] = None,
) -> ProgressEngine:
    settings = settings or get_settings()
    return ProgressEngine(
        settings,
        storage or SqlStorage(settings.local_store_url, echo=settings.debug),
        remote or build_remote(settings),
        units=units,
        catalog=catalog,
    )


@asynccontextmanager
async def engine_lifespan(
    settings: Optional[Settings] = None,
    **kwargs,
) -> AsyncGenerator[ProgressEngine, None]:
    """
    Configure logging, build the engine, and drain pending pushes on exit.
    """
    settings = settings or get_settings()
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )
    logger.info("Starting %s v%s", settings.project_name, settings.version)
    if settings.demo_mode:
        logger.info("No remote configured, running in demo mode")

    engine = build_engine(settings, **kwargs)
    try:
        yield engine
    finally:
        logger.info("Shutting down...")
        await engine.aclose()
        logger.info("Pending pushes drained, storage closed")
