# bugtracker/core/events.py
"""Structured event sinks.

The bug service reports what it did as named events with keyword fields and
leaves it to the caller to decide where they go. The HTTP layer wires in
``LoggingEventSink``, which hands each event to structlog.
"""
from typing import Any, Protocol

import structlog


class EventSink(Protocol):
    def emit(self, event: str, **fields: Any) -> None: ...


class NullEventSink:
    def emit(self, event: str, **fields: Any) -> None:
        return None


class LoggingEventSink:
    def __init__(self, logger=None):
        self.logger = logger or structlog.get_logger("bugtracker.events")

    def emit(self, event: str, **fields: Any) -> None:
        self.logger.info(event, **fields)


def get_event_sink() -> EventSink:
    return LoggingEventSink()


__all__ = ["EventSink", "NullEventSink", "LoggingEventSink", "get_event_sink"]
