"""
Application services that orchestrate the engines.
"""

from learner_progress.services.study_session import AnswerResult, SessionSummary, StudySession

__all__ = [
    "AnswerResult",
    "SessionSummary",
    "StudySession",
]
