"""
Lesson ratchet - pure transitions over LessonProgress.

completed only goes False -> True and score never decreases, so a partial
retry can never erase an earlier success.
"""

from datetime import datetime
from typing import Mapping, Optional

from learner_progress.kernel.rounding import percentage
from learner_progress.schemas.progress import LessonProgress


def new_lesson(lesson_id: str) -> LessonProgress:
    return LessonProgress(lesson_id=lesson_id)


def running_percentage(exercise_scores: Mapping[str, bool]) -> int:
    correct = sum(1 for ok in exercise_scores.values() if ok)
    return percentage(correct, len(exercise_scores))


def start(record: Optional[LessonProgress], lesson_id: str) -> LessonProgress:
    record = record or new_lesson(lesson_id)
    return record.model_copy(update={"attempts": record.attempts + 1})


def record_exercise(
    record: Optional[LessonProgress],
    lesson_id: str,
    exercise_id: str,
    correct: bool,
) -> LessonProgress:
    record = record or new_lesson(lesson_id)
    scores = dict(record.exercise_scores)
    scores[exercise_id] = bool(correct)
    return record.model_copy(update={
        "exercise_scores": scores,
        "score": max(record.score, running_percentage(scores)),
    })


def complete(
    record: Optional[LessonProgress],
    lesson_id: str,
    final_score: int,
    now: datetime,
) -> LessonProgress:
    """Mark completed at now. completed_at moves to the latest completion."""
    record = record or new_lesson(lesson_id)
    final_score = min(100, max(0, int(final_score)))
    return record.model_copy(update={
        "completed": True,
        "completed_at": now,
        "score": max(record.score, final_score),
    })
