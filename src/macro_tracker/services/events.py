"""In-process publish/subscribe for day and target updates."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

DAY_TOTALS_EVENT = "day:totals"
TARGETS_UPDATE_EVENT = "targets:update"

Handler = Callable[[dict[str, object]], None]

logger = logging.getLogger(__name__)


class EventPublisher(Protocol):
    """Interface for emitting events to observers."""

    def emit(self, event: str, payload: dict[str, object]) -> None:
        """Call every handler currently registered for the event."""


@dataclass
class EventBus(EventPublisher):
    """Synchronous event bus scoped to a container.

    Handlers run in registration order. Events are not stored, so a handler
    registered after an emit never sees it.
    """

    _handlers: dict[str, list[Handler]] = field(default_factory=dict)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """Register a handler and return a callable that removes it."""
        handlers = self._handlers.setdefault(event, [])
        handlers.append(handler)

        def unsubscribe() -> None:
            current = self._handlers.get(event, [])
            if handler in current:
                current.remove(handler)

        return unsubscribe

    def emit(self, event: str, payload: dict[str, object]) -> None:
        """Call every handler registered for the event."""
        handlers = list(self._handlers.get(event, []))
        logger.debug("Emitting %s to %d handler(s)", event, len(handlers))
        for handler in handlers:
            handler(payload)
