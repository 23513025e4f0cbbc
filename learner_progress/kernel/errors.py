"""
Error taxonomy for the progress engine.

RemoteUnavailable is raised by remote adapters and swallowed at the sync
boundary. DeserializationFailure is raised by the snapshot codec and handled
by store hydration. Merge disagreements are not errors.
"""

from typing import Optional


class ProgressEngineError(Exception):
    """Base class for all engine errors."""


class RemoteUnavailable(ProgressEngineError):
    """A remote fetch/update/unlock call failed."""

    def __init__(
        self,
        operation: str,
        domain: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        self.operation = operation
        self.domain = domain
        self.cause = cause
        detail = f"{operation} failed"
        if domain:
            detail += f" for domain '{domain}'"
        if cause is not None:
            detail += f": {cause}"
        super().__init__(detail)


class DeserializationFailure(ProgressEngineError):
    """A persisted local snapshot is missing, malformed or cannot be migrated."""

    def __init__(self, store_name: str, reason: str):
        self.store_name = store_name
        self.reason = reason
        super().__init__(f"Cannot load '{store_name}': {reason}")


class CurriculumGraphError(ProgressEngineError):
    """The unit prerequisite graph is not a valid DAG."""


class UnknownUnitError(ProgressEngineError, KeyError):
    """A unit id is not part of the curriculum graph."""

    def __init__(self, unit_id: str):
        self.unit_id = unit_id
        super().__init__(unit_id)

    def __str__(self) -> str:
        return f"Unknown curriculum unit: {self.unit_id}"
