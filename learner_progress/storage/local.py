"""
Local persistence - a synchronous key-value byte store keyed by store name.

Writes complete before the call returns, so a mutation that has returned is
durable locally. Local storage is the source of truth for resuming a session.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from learner_progress.kernel.models import Base, StoreEntry
from learner_progress.logging_config import get_logger

logger = get_logger(__name__)


class LocalStorage(ABC):
    """Key-value byte store interface."""

    @abstractmethod
    def get_item(self, name: str) -> Optional[bytes]:
        """Return stored bytes, or None if the name was never written."""

    @abstractmethod
    def set_item(self, name: str, value: bytes) -> None:
        """Store bytes under name, replacing any previous value."""

    @abstractmethod
    def remove_item(self, name: str) -> None:
        """Delete name if present."""

    def close(self) -> None:
        """Release resources. No-op by default."""


class MemoryStorage(LocalStorage):
    """Process-local storage for demo mode and tests."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._items: Dict[str, bytes] = dict(initial or {})

    def get_item(self, name: str) -> Optional[bytes]:
        return self._items.get(name)

    def set_item(self, name: str, value: bytes) -> None:
        self._items[name] = bytes(value)

    def remove_item(self, name: str) -> None:
        self._items.pop(name, None)

    def keys(self):
        return list(self._items.keys())


class SqlStorage(LocalStorage):
    """
    SQLAlchemy-backed storage. Uses one row per store name in
    `local_store_entries`; the table is created on first use.
    """

    def __init__(self, url: str, echo: bool = False):
        is_sqlite = url.startswith("sqlite")
        connect_args = {"check_same_thread": False} if is_sqlite else {}
        self.engine = create_engine(url, echo=echo, connect_args=connect_args)

        if is_sqlite:
            @event.listens_for(self.engine, "connect")
            def _set_sqlite_pragma(dbapi_conn, connection_record):
                """Durable writes with WAL on every new SQLite connection."""
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA synchronous=FULL")
                cursor.close()

        Base.metadata.create_all(self.engine)
        self._session_maker = sessionmaker(self.engine, expire_on_commit=False)
        logger.debug("Local storage ready", extra={"url": url})

    def get_item(self, name: str) -> Optional[bytes]:
        with self._session_maker() as session:
            entry = session.get(StoreEntry, name)
            return bytes(entry.value) if entry is not None else None

    def set_item(self, name: str, value: bytes) -> None:
        with self._session_maker.begin() as session:
            entry = session.get(StoreEntry, name)
            if entry is None:
                session.add(StoreEntry(name=name, value=bytes(value)))
            else:
                entry.value = bytes(value)

    def remove_item(self, name: str) -> None:
        with self._session_maker.begin() as session:
            entry = session.get(StoreEntry, name)
            if entry is not None:
                session.delete(entry)

    def close(self) -> None:
        self.engine.dispose()
