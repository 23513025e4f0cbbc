"""
Snapshot codec - versioned JSON envelopes for local persistence.

Stored form: {"version": n, "data": {...}}. Data written before versioning
(a bare object) is treated as version 1. Migrations run one version at a
time; any failure, or a document that does not validate, raises
DeserializationFailure so the caller can fall back to defaults.
"""

import json
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from pydantic import ValidationError

from learner_progress.kernel.errors import DeserializationFailure
from learner_progress.schemas.snapshots import DomainSnapshot

SnapshotT = TypeVar("SnapshotT", bound=DomainSnapshot)
MigrationFn = Callable[[Any], Any]

CURRENT_VERSION = 1


class SnapshotCodec:
    """Encodes/decodes one store's snapshot with schema migrations."""

    def __init__(
        self,
        current_version: int = CURRENT_VERSION,
        migrations: Optional[Dict[int, MigrationFn]] = None,
    ):
        self.current_version = current_version
        self.migrations = dict(migrations or {})

    def encode(self, snapshot: DomainSnapshot) -> bytes:
        envelope = {"version": self.current_version, "data": snapshot.to_document()}
        return json.dumps(envelope, ensure_ascii=False).encode("utf-8")

    def decode(self, raw: bytes, snapshot_type: Type[SnapshotT], store_name: str) -> SnapshotT:
        try:
            stored = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DeserializationFailure(store_name, f"invalid JSON ({e})") from e

        if not isinstance(stored, dict):
            raise DeserializationFailure(store_name, "stored value is not an object")

        data, version = self._unwrap(stored)
        if version > self.current_version:
            raise DeserializationFailure(
                store_name,
                f"stored version {version} is newer than supported {self.current_version}",
            )

        while version < self.current_version:
            next_version = version + 1
            migration = self.migrations.get(next_version)
            if migration is not None:
                try:
                    data = migration(data)
                except Exception as e:
                    raise DeserializationFailure(
                        store_name, f"migration to version {next_version} failed ({e})"
                    ) from e
            version = next_version

        try:
            return snapshot_type.model_validate(data)
        except ValidationError as e:
            raise DeserializationFailure(store_name, f"invalid snapshot ({e.error_count()} errors)") from e

    @staticmethod
    def _unwrap(stored: Dict[str, Any]):
        if "version" in stored and "data" in stored:
            version = stored["version"] if isinstance(stored["version"], int) else 1
            return stored["data"], version
        # Legacy unversioned document
        return stored, 1


def stored_version(raw: Optional[bytes]) -> int:
    """Version of a stored envelope; 0 when absent or unreadable."""
    if not raw:
        return 0
    try:
        stored = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return 0
    if isinstance(stored, dict):
        version = stored.get("version")
        return version if isinstance(version, int) else 1
    return 0
