"""
In-process event bus with an append-only history.

Subscribers run synchronously, in subscription order, after the publishing
mutation has completed. A failing subscriber is logged and skipped so that
effect scheduling can never undo or block a local state change.
"""

from typing import Callable, List, Optional, Type

from learner_progress.kernel.events.event_types import BaseEvent
from learner_progress.logging_config import get_logger

logger = get_logger(__name__)

Subscriber = Callable[[BaseEvent], None]


class EventBus:
    """
    Publishes domain events to subscribers.

    Usage:
        bus = EventBus()
        bus.subscribe(coordinator.handle_event)
        bus.publish(UserProgressChanged(domain=Domain.USER, reason="xp", xp=120))
    """

    def __init__(self, history_limit: int = 500):
        self._subscribers: List[Subscriber] = []
        self._history: List[BaseEvent] = []
        self._history_limit = history_limit

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a subscriber. Returns a callable that unsubscribes it."""
        self._subscribers.append(subscriber)

        def _unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return _unsubscribe

    def publish(self, event: BaseEvent) -> None:
        """Record the event and deliver it to every subscriber."""
        self._history.append(event)
        if len(self._history) > self._history_limit:
            del self._history[: len(self._history) - self._history_limit]

        logger.debug(
            "Event %s",
            type(event).__name__,
            extra={"domain": event.domain.value},
        )
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                logger.exception(
                    "Event subscriber failed",
                    extra={"event_type": type(event).__name__},
                )

    def history(self, event_type: Optional[Type[BaseEvent]] = None) -> List[BaseEvent]:
        """Return recorded events, oldest first, optionally filtered by type."""
        if event_type is None:
            return list(self._history)
        return [e for e in self._history if isinstance(e, event_type)]
