"""
Curriculum - prerequisite unlock graph and placement scoring.
"""

from learner_progress.engines.curriculum.placement import (
    LEVEL_THRESHOLD,
    calculate_level,
    empty_breakdown,
    score_placement,
)
from learner_progress.engines.curriculum.unlock_graph import NextLesson, UnlockGraphResolver

__all__ = [
    "LEVEL_THRESHOLD",
    "calculate_level",
    "empty_breakdown",
    "score_placement",
    "NextLesson",
    "UnlockGraphResolver",
]
