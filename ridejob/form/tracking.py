"""Analytics event sinks for the form core."""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class EventSink(Protocol):
    """Receives analytics events (GTM data layer, server log, ...)."""

    def record(self, event_name: str, attributes: dict[str, Any]) -> None: ...


class LoggingEventSink:
    """Default sink: writes events to the application log."""

    def record(self, event_name: str, attributes: dict[str, Any]) -> None:
        logger.info(f"event={event_name} {attributes}")


class InMemoryEventSink:
    """Buffers events in order of arrival."""

    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []

    def record(self, event_name: str, attributes: dict[str, Any]) -> None:
        self.events.append((event_name, dict(attributes)))

    def names(self) -> list[str]:
        return [name for name, _ in self.events]


def step_event_payload(step: int) -> dict[str, Any]:
    return {"step_name": f"step_{step}", "step_number": step}
