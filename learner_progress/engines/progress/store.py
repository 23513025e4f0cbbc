"""
Progress Store - canonical per-domain learner state.

Every mutation is synchronous: compute the new snapshot with a pure
transition, persist it locally, then publish an event. Nothing here talks
to the network; remote pushes are scheduled by subscribers of the bus.
"""

from datetime import date, datetime
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from learner_progress.engines.curriculum.placement import score_placement
from learner_progress.engines.progress import lessons
from learner_progress.kernel.errors import DeserializationFailure
from learner_progress.kernel.events import (
    AchievementUnlocked,
    BaseEvent,
    CurriculumStateChanged,
    DomainReplaced,
    DomainReset,
    EventBus,
    LessonProgressChanged,
    PlacementCompleted,
    UserProgressChanged,
)
from learner_progress.kernel.rounding import round_half_up
from learner_progress.logging_config import get_logger
from learner_progress.schemas.catalog import PlacementQuestion
from learner_progress.schemas.progress import (
    CEFRLevel,
    LessonProgress,
    PlacementResult,
    UnlockedAchievement,
    UserProgress,
)
from learner_progress.schemas.snapshots import (
    SNAPSHOT_TYPES,
    STORE_NAMES,
    AchievementsSnapshot,
    CurriculumSnapshot,
    Domain,
    DomainSnapshot,
    GrammarSnapshot,
    UserSnapshot,
)
from learner_progress.storage.codec import SnapshotCodec
from learner_progress.storage.local import LocalStorage

logger = get_logger(__name__)

LESSON_TRACKS = (Domain.CURRICULUM, Domain.GRAMMAR)


def _local_now() -> datetime:
    # Calendar days follow the device time zone
    return datetime.now().astimezone()


class ProgressStore:
    """
    Holds one snapshot per domain, hydrated from local storage at
    construction. Unreadable snapshots fall back to defaults.
    """

    def __init__(
        self,
        storage: LocalStorage,
        bus: Optional[EventBus] = None,
        *,
        codec: Optional[SnapshotCodec] = None,
        lesson_to_unit: Optional[Callable[[str], Optional[str]]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.bus = bus or EventBus()
        self.codec = codec or SnapshotCodec()
        self.lesson_to_unit = lesson_to_unit
        self._clock = clock or _local_now
        self._snapshots: Dict[Domain, DomainSnapshot] = {
            domain: self._hydrate(domain) for domain in Domain
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _hydrate(self, domain: Domain) -> DomainSnapshot:
        store_name = STORE_NAMES[domain]
        snapshot_type = SNAPSHOT_TYPES[domain]
        raw = self.storage.get_item(store_name)
        if raw is None:
            return snapshot_type()
        try:
            return self.codec.decode(raw, snapshot_type, store_name)
        except DeserializationFailure as e:
            logger.warning(
                "Discarding unreadable local snapshot",
                extra={"store": store_name, "reason": e.reason},
            )
            return snapshot_type()

    def _commit(self, domain: Domain, snapshot: DomainSnapshot, event: Optional[BaseEvent]) -> None:
        self.storage.set_item(STORE_NAMES[domain], self.codec.encode(snapshot))
        self._snapshots[domain] = snapshot
        if event is not None:
            self.bus.publish(event)

    def now(self) -> datetime:
        return self._clock()

    def today(self) -> date:
        return self._clock().date()

    # ------------------------------------------------------------------
    # Snapshot access
    # ------------------------------------------------------------------

    def snapshot(self, domain: Domain) -> DomainSnapshot:
        return self._snapshots[Domain(domain)]

    @property
    def curriculum(self) -> CurriculumSnapshot:
        return self._snapshots[Domain.CURRICULUM]  # type: ignore[return-value]

    @property
    def grammar(self) -> GrammarSnapshot:
        return self._snapshots[Domain.GRAMMAR]  # type: ignore[return-value]

    @property
    def user(self) -> UserProgress:
        return self._snapshots[Domain.USER].progress  # type: ignore[attr-defined]

    @property
    def achievements(self) -> AchievementsSnapshot:
        return self._snapshots[Domain.ACHIEVEMENTS]  # type: ignore[return-value]

    def replace_domain(self, domain: Domain, snapshot: DomainSnapshot, source: str = "merge") -> None:
        """Swap in a whole snapshot (sign-in merge). Persisted, not re-pushed."""
        domain = Domain(domain)
        expected = SNAPSHOT_TYPES[domain]
        if not isinstance(snapshot, expected):
            raise TypeError(f"{domain.value} expects {expected.__name__}, got {type(snapshot).__name__}")
        self._commit(domain, snapshot, DomainReplaced(domain=domain, source=source))

    def reset_progress(self, domain: Domain) -> None:
        """Explicit full reset. The only path that removes lesson records."""
        domain = Domain(domain)
        self._commit(domain, SNAPSHOT_TYPES[domain](), DomainReset(domain=domain))
        logger.info("Progress reset", extra={"domain": domain.value})

    # ------------------------------------------------------------------
    # Lessons
    # ------------------------------------------------------------------

    @staticmethod
    def _check_track(track: Domain) -> Domain:
        track = Domain(track)
        if track not in LESSON_TRACKS:
            raise ValueError(f"'{track.value}' does not hold lessons")
        return track

    def lesson_progress(self, track: Domain = Domain.CURRICULUM) -> Mapping[str, LessonProgress]:
        return dict(self.snapshot(self._check_track(track)).lesson_progress)  # type: ignore[attr-defined]

    def get_lesson_progress(self, lesson_id: str, track: Domain = Domain.CURRICULUM) -> Optional[LessonProgress]:
        return self.lesson_progress(track).get(lesson_id)

    def is_lesson_completed(self, lesson_id: str, track: Domain = Domain.CURRICULUM) -> bool:
        record = self.get_lesson_progress(lesson_id, track)
        return bool(record and record.completed)

    def completed_lesson_count(self, track: Domain = Domain.CURRICULUM) -> int:
        return sum(1 for record in self.lesson_progress(track).values() if record.completed)

    def average_completed_score(self, track: Domain = Domain.GRAMMAR) -> int:
        """Mean best score over completed lessons, 0 when none are completed."""
        scores = [r.score for r in self.lesson_progress(track).values() if r.completed]
        return round_half_up(sum(scores) / len(scores)) if scores else 0

    def _write_lesson(
        self,
        track: Domain,
        record: LessonProgress,
        action: str,
        current_lesson: Optional[str],
        touch_current: bool,
    ) -> LessonProgress:
        snapshot = self.snapshot(track)
        lesson_map = dict(snapshot.lesson_progress)  # type: ignore[attr-defined]
        lesson_map[record.lesson_id] = record
        update = {"lesson_progress": lesson_map}

        if touch_current:
            if track == Domain.CURRICULUM:
                update["current_lesson_id"] = current_lesson
                if current_lesson is not None and self.lesson_to_unit is not None:
                    update["current_unit_id"] = self.lesson_to_unit(current_lesson)
            else:
                update["current_lesson"] = current_lesson

        self._commit(
            track,
            snapshot.model_copy(update=update),
            LessonProgressChanged(
                domain=track,
                lesson_id=record.lesson_id,
                action=action,
                completed=record.completed,
                score=record.score,
            ),
        )
        return record

    def start_lesson(self, lesson_id: str, track: Domain = Domain.CURRICULUM) -> LessonProgress:
        """Create the record if absent and count an attempt."""
        track = self._check_track(track)
        record = lessons.start(self.get_lesson_progress(lesson_id, track), lesson_id)
        return self._write_lesson(track, record, "started", lesson_id, touch_current=True)

    def complete_exercise(
        self,
        lesson_id: str,
        exercise_id: str,
        correct: bool,
        track: Domain = Domain.GRAMMAR,
    ) -> LessonProgress:
        track = self._check_track(track)
        record = lessons.record_exercise(
            self.get_lesson_progress(lesson_id, track), lesson_id, exercise_id, correct
        )
        return self._write_lesson(track, record, "exercise", None, touch_current=False)

    def complete_lesson(
        self,
        lesson_id: str,
        final_score: int,
        track: Domain = Domain.CURRICULUM,
    ) -> LessonProgress:
        """Idempotent with respect to completed; score only ever rises."""
        track = self._check_track(track)
        record = lessons.complete(
            self.get_lesson_progress(lesson_id, track), lesson_id, final_score, self.now()
        )
        return self._write_lesson(track, record, "completed", None, touch_current=True)

    # ------------------------------------------------------------------
    # Placement and level
    # ------------------------------------------------------------------

    def _update_curriculum(self, reason: str, **update) -> None:
        self._commit(
            Domain.CURRICULUM,
            self.curriculum.model_copy(update=update),
            CurriculumStateChanged(domain=Domain.CURRICULUM, reason=reason),
        )

    def start_placement_test(self) -> None:
        self._update_curriculum("placement_started", placement_in_progress=True, placement_answers={})

    def answer_placement_question(self, question_id: str, answer: str) -> None:
        answers = dict(self.curriculum.placement_answers)
        answers[question_id] = answer
        self._update_curriculum("placement_answer", placement_answers=answers)

    def complete_placement_test(self, questions: Sequence[PlacementQuestion]) -> PlacementResult:
        """Score the recorded answers, replace any earlier result and set the level."""
        result = score_placement(self.curriculum.placement_answers, questions, self.now())
        snapshot = self.curriculum.model_copy(update={
            "placement_result": result,
            "placement_in_progress": False,
            "placement_answers": {},
            "current_level": result.level,
        })
        self._commit(
            Domain.CURRICULUM,
            snapshot,
            PlacementCompleted(domain=Domain.CURRICULUM, level=result.level.value, score=result.score),
        )
        logger.info(
            "Placement completed",
            extra={"level": result.level.value, "score": result.score},
        )
        return result

    def reset_placement(self) -> None:
        self._update_curriculum(
            "placement_reset",
            placement_result=None,
            placement_in_progress=False,
            placement_answers={},
        )

    def set_current_level(self, level: CEFRLevel) -> None:
        self._update_curriculum("current_level", current_level=CEFRLevel(level))

    # ------------------------------------------------------------------
    # User progress and achievements
    # ------------------------------------------------------------------

    def apply_user_progress(self, progress: UserProgress, reason: str) -> UserProgress:
        """Write back a UserProgress produced by the gamification engine."""
        previous_level = self.user.level
        self._commit(
            Domain.USER,
            UserSnapshot(progress=progress),
            UserProgressChanged(
                domain=Domain.USER,
                reason=reason,
                xp=progress.xp,
                level=progress.level,
                current_streak=progress.current_streak,
                leveled_up=progress.level > previous_level,
            ),
        )
        return progress

    def record_unlocked(self, unlocked: Sequence[UnlockedAchievement]) -> List[UnlockedAchievement]:
        """Append unseen ids to the unlocked set. Returns only the new entries."""
        known = self.achievements.unlocked_ids()
        added: List[UnlockedAchievement] = []
        for entry in unlocked:
            if entry.achievement_id in known:
                continue
            known.add(entry.achievement_id)
            added.append(entry)

        if added:
            self._commit(
                Domain.ACHIEVEMENTS,
                AchievementsSnapshot(unlocked=list(self.achievements.unlocked) + added),
                AchievementUnlocked(
                    domain=Domain.ACHIEVEMENTS,
                    achievement_ids=[entry.achievement_id for entry in added],
                ),
            )
        return added
