"""
SQLAlchemy models for local persistence.
"""

from learner_progress.kernel.models.base import Base, TimestampMixin
from learner_progress.kernel.models.local_store import StoreEntry

__all__ = [
    "Base",
    "TimestampMixin",
    "StoreEntry",
]
