"""
Central logging configuration for the learner progress engine.

Provides:
- Structured logging (JSON in production, human-readable in development)
- User correlation via contextvars (user_id set at sign-in)
- Environment-aware log levels

Usage:
    from learner_progress.logging_config import get_logger
    logger = get_logger(__name__)
    logger.info("Merged remote snapshot", extra={"domain": domain.value})
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Optional

# Context var for the signed-in user - set by the sync coordinator
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


def get_user_id() -> Optional[str]:
    """Get the current user ID from context, if set."""
    return user_id_var.get()


class UserIdFilter(logging.Filter):
    """Filter that adds user_id to log records from context."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.user_id = get_user_id() or "-"  # type: ignore[attr-defined]
        return True


_RESERVED_ATTRS = (
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "message", "taskName", "user_id",
)


class JsonFormatter(logging.Formatter):
    """Format log records as JSON for production log aggregators."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        user_id = getattr(record, "user_id", None)
        if user_id and user_id != "-":
            log_obj["user_id"] = user_id

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        # Anything passed via extra= in the log call
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and value is not None:
                try:
                    json.dumps(value)
                    log_obj[key] = value
                except (TypeError, ValueError):
                    log_obj[key] = str(value)

        return json.dumps(log_obj)


def _create_dev_formatter() -> logging.Formatter:
    return logging.Formatter(
        "%(asctime)s %(levelname)-5s [%(name)s] user=%(user_id)s %(message)s",
        datefmt="%H:%M:%S",
    )


def configure_logging(
    *,
    log_level: str = "INFO",
    environment: str = "development",
    debug: bool = False,
) -> None:
    """
    Configure process-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        environment: 'development' or 'production'
        debug: If True, use DEBUG level regardless of log_level
    """
    level = logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO)

    old_factory = logging.getLogRecordFactory()

    def record_factory(*args: Any, **kwargs: Any) -> logging.LogRecord:
        record = old_factory(*args, **kwargs)
        if not hasattr(record, "user_id"):
            setattr(record, "user_id", "-")
        return record

    logging.setLogRecordFactory(record_factory)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove existing handlers to avoid duplicates on reconfigure
    for h in root.handlers[:]:
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(UserIdFilter())

    if environment == "production":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(_create_dev_formatter())

    root.addHandler(handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger for the given module name.

    Logs automatically include user_id when a user is signed in.
    Use extra={} for additional structured fields:
        logger.warning("Push failed", extra={"domain": "user"})
    """
    return logging.getLogger(name)
