"""
Local key-value store model - one row per persisted store name.
"""

from sqlalchemy import LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from learner_progress.kernel.models.base import Base, TimestampMixin


class StoreEntry(Base, TimestampMixin):
    """
    Raw bytes of one persisted store (e.g. 'learner-user').
    The payload is a versioned JSON envelope written by the snapshot codec.
    """

    __tablename__ = "local_store_entries"

    name: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    def __repr__(self) -> str:
        return f"<StoreEntry {self.name} ({len(self.value)} bytes)>"
