"""In-process event sink used to publish adapter status to the host."""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict[str, Any]], None]


class EventEmitter:
    """A minimal publish/subscribe registry keyed by event name.

    Handlers run synchronously in registration order. A handler that
    raises is logged and skipped so emission itself never fails.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def on(self, event: str, handler: EventHandler) -> None:
        """Register a handler for an event."""
        self._handlers[event].append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        """Remove a previously registered handler.

        Raises:
            ValueError: If the handler is not registered for the event.
        """
        handlers = self._handlers.get(event, [])
        if handler not in handlers:
            raise ValueError(f"Handler not registered for event {event}")
        handlers.remove(handler)

    def listener_count(self, event: str) -> int:
        """Return the number of handlers registered for an event."""
        return len(self._handlers.get(event, []))

    def emit(self, event: str, payload: dict[str, Any]) -> int:
        """Deliver a payload to every handler of an event.

        Returns:
            Number of handlers that completed without raising.
        """
        delivered = 0
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(payload)
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Event handler for {event} failed: {e}", exc_info=True
                )
        return delivered


__all__ = ["EventEmitter", "EventHandler"]
