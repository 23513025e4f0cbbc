"""
Local and remote persistence adapters.
"""

from learner_progress.storage.codec import CURRENT_VERSION, SnapshotCodec
from learner_progress.storage.local import LocalStorage, MemoryStorage, SqlStorage
from learner_progress.storage.remote import (
    HttpRemoteStore,
    InMemoryRemoteStore,
    NullRemoteStore,
    RemoteStore,
)

__all__ = [
    "CURRENT_VERSION",
    "SnapshotCodec",
    "LocalStorage",
    "MemoryStorage",
    "SqlStorage",
    "RemoteStore",
    "NullRemoteStore",
    "InMemoryRemoteStore",
    "HttpRemoteStore",
]
