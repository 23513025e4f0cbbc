"""
Sign-in merge - pure reconciliation of a local snapshot with the remote one.

Per record key, remote wins if its record is completed or local has no
record for that key; otherwise local wins. Records are replaced whole, so
incomplete exercise detail on the losing side is dropped. Session-only
fields always come from local.
"""

from datetime import timezone
from typing import Callable, Dict, Mapping, NamedTuple, Optional

from learner_progress.schemas.progress import LessonProgress, UnlockedAchievement
from learner_progress.schemas.snapshots import (
    AchievementsSnapshot,
    CurriculumSnapshot,
    Domain,
    DomainSnapshot,
    GrammarSnapshot,
    UserSnapshot,
)


class MergeOutcome(NamedTuple):
    merged: DomainSnapshot
    # True when the merged result differs from what the remote holds
    changed_vs_remote: bool


def _outcome(merged: DomainSnapshot, remote: DomainSnapshot) -> MergeOutcome:
    return MergeOutcome(merged, not merged.same_remote_content(remote))


def pick_record(local: Optional[LessonProgress], remote: Optional[LessonProgress]) -> Optional[LessonProgress]:
    if remote is not None and (remote.completed or local is None):
        return remote
    return local


def merge_lesson_records(
    local: Mapping[str, LessonProgress],
    remote: Mapping[str, LessonProgress],
) -> Dict[str, LessonProgress]:
    """Key-wise merge. Local key order first, then remote-only keys."""
    merged: Dict[str, LessonProgress] = {}
    for lesson_id in list(local.keys()) + [k for k in remote.keys() if k not in local]:
        record = pick_record(local.get(lesson_id), remote.get(lesson_id))
        if record is not None:
            merged[lesson_id] = record
    return merged


def merge_curriculum(local: CurriculumSnapshot, remote: CurriculumSnapshot) -> MergeOutcome:
    """
    Lessons merge key-wise. The placement result is one record: remote's
    is taken only when local has none, and current_level follows whichever
    placement was kept.
    """
    placement_result = local.placement_result
    current_level = local.current_level
    if local.placement_result is None and remote.placement_result is not None:
        placement_result = remote.placement_result
        current_level = remote.current_level

    merged = local.model_copy(update={
        "lesson_progress": merge_lesson_records(local.lesson_progress, remote.lesson_progress),
        "placement_result": placement_result,
        "current_level": current_level,
    })
    return _outcome(merged, remote)


def merge_grammar(local: GrammarSnapshot, remote: GrammarSnapshot) -> MergeOutcome:
    merged = local.model_copy(update={
        "lesson_progress": merge_lesson_records(local.lesson_progress, remote.lesson_progress),
    })
    return _outcome(merged, remote)


def merge_user(local: UserSnapshot, remote: UserSnapshot) -> MergeOutcome:
    """UserProgress is a single record; untouched local progress counts as absent."""
    merged = remote if local.is_pristine() else local
    return _outcome(merged, remote)


def _unlock_order(entry: UnlockedAchievement):
    at = entry.unlocked_at
    if at.tzinfo is None:
        at = at.replace(tzinfo=timezone.utc)
    return at, entry.achievement_id


def merge_achievements(local: AchievementsSnapshot, remote: AchievementsSnapshot) -> MergeOutcome:
    """Union by id. For an id on both sides the local entry is kept."""
    entries = {entry.achievement_id: entry for entry in remote.unlocked}
    entries.update({entry.achievement_id: entry for entry in local.unlocked})
    unlocked = sorted(entries.values(), key=_unlock_order)
    return _outcome(AchievementsSnapshot(unlocked=unlocked), remote)


MERGERS: Dict[Domain, Callable[..., MergeOutcome]] = {
    Domain.CURRICULUM: merge_curriculum,
    Domain.GRAMMAR: merge_grammar,
    Domain.USER: merge_user,
    Domain.ACHIEVEMENTS: merge_achievements,
}


def merge_domain(domain: Domain, local: DomainSnapshot, remote: DomainSnapshot) -> MergeOutcome:
    return MERGERS[Domain(domain)](local, remote)
