"""event-recognizer: natural-language events to iCalendar.

Recognizes events described in free text via Gemini and exports the
selected ones as an ``events.ics`` calendar file.
"""

from __future__ import annotations

from event_recognizer.calendar_encoder import encode, export_calendar
from event_recognizer.exceptions import (
    EventRecognizerError,
    ExtractionError,
    ExtractionInProgressError,
    InputTooLongError,
    MalformedResponseError,
    RateLimitedError,
)
from event_recognizer.models.event import CalendarFile, Event
from event_recognizer.rate_governor import RateGovernor, RatePolicy, RateState, admit
from event_recognizer.response_parser import parse
from event_recognizer.selection import select_all, toggle
from event_recognizer.session import RecognizerSession

__version__ = "0.1.0"

__all__ = [
    "CalendarFile",
    "Event",
    "EventRecognizerError",
    "ExtractionError",
    "ExtractionInProgressError",
    "InputTooLongError",
    "MalformedResponseError",
    "RateGovernor",
    "RateLimitedError",
    "RatePolicy",
    "RateState",
    "RecognizerSession",
    "admit",
    "encode",
    "export_calendar",
    "parse",
    "select_all",
    "toggle",
]
