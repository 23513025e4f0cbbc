"""
Progress - lesson ratchet transitions and the per-domain Progress Store.
"""

from learner_progress.engines.progress.store import LESSON_TRACKS, ProgressStore

__all__ = [
    "LESSON_TRACKS",
    "ProgressStore",
]
