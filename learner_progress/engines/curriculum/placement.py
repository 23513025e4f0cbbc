"""
Placement Scorer - turns quiz answers into a per-level breakdown and a CEFR level.
"""

from datetime import datetime
from typing import Dict, Mapping, Sequence

from learner_progress.kernel.rounding import percentage
from learner_progress.schemas.catalog import PlacementQuestion
from learner_progress.schemas.progress import CEFR_ORDER, CEFRLevel, LevelScore, PlacementResult

# Absolute number of correct answers needed to place into a level
LEVEL_THRESHOLD = 3


def empty_breakdown() -> Dict[CEFRLevel, LevelScore]:
    return {level: LevelScore() for level in CEFR_ORDER}


def calculate_level(breakdown: Mapping[CEFRLevel, LevelScore]) -> CEFRLevel:
    """
    Scan hardest to easiest and return the first level with enough correct
    answers. Clearing B2 places at B2 even if A2 was failed.
    """
    for level in reversed(CEFR_ORDER):
        score = breakdown.get(level)
        if score is not None and score.correct >= LEVEL_THRESHOLD:
            return level
    return CEFRLevel.A1


def score_placement(
    answers: Mapping[str, str],
    questions: Sequence[PlacementQuestion],
    taken_at: datetime,
) -> PlacementResult:
    """Score answers against the question bank. Unanswered questions count as wrong."""
    breakdown = empty_breakdown()
    total_correct = 0

    for question in questions:
        bucket = breakdown[question.level]
        bucket.total += 1
        if answers.get(question.id) == question.correct_answer:
            bucket.correct += 1
            total_correct += 1

    return PlacementResult(
        level=calculate_level(breakdown),
        score=percentage(total_correct, len(questions)),
        total_questions=len(questions),
        correct_answers=total_correct,
        taken_at=taken_at,
        breakdown=breakdown,
    )
