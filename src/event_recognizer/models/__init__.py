"""Data models for event-recognizer."""

from __future__ import annotations

from event_recognizer.models.event import CalendarFile, Event, ResponseEvent

__all__ = [
    "CalendarFile",
    "Event",
    "ResponseEvent",
]
