"""
Sync - sign-in merge and best-effort remote pushes.
"""

from learner_progress.engines.sync.coordinator import SyncCoordinator, SyncState, can_transition
from learner_progress.engines.sync.merge import (
    MergeOutcome,
    merge_achievements,
    merge_curriculum,
    merge_domain,
    merge_grammar,
    merge_lesson_records,
    merge_user,
    pick_record,
)

__all__ = [
    "SyncCoordinator",
    "SyncState",
    "can_transition",
    "MergeOutcome",
    "merge_achievements",
    "merge_curriculum",
    "merge_domain",
    "merge_grammar",
    "merge_lesson_records",
    "merge_user",
    "pick_record",
]
