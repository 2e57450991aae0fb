"""Data models for recognized events and exported calendar files.

- :class:`Event` -- a single recognized event with a locally assigned id.
  Date and time stay strings: they are checked for type, not for shape,
  and flow verbatim into the calendar output.
- :class:`CalendarFile` -- the downloadable payload produced by the
  calendar encoder.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

ICS_FILENAME = "events.ics"
ICS_MEDIA_TYPE = "text/calendar; charset=utf-8"

MAX_EVENTS = 50
MAX_FIELD_LENGTH = 500


class ResponseEvent(BaseModel):
    """Schema for one element of the completion service's JSON array.

    Validation is strict: strings must be JSON strings and ``alarm`` a
    non-negative JSON integer (``true``/``false``, floats and numeric
    strings are rejected).  Unknown keys, including any ``id`` the service
    invents, are dropped.

    Attributes:
        title: Event title; missing or ``null`` becomes ``""``.
        date: Event date; missing or ``null`` becomes ``""``.
        time: Event time; missing or ``null`` becomes ``""``.
        recurrence: Optional ``RRULE`` value.
        alarm: Optional reminder offset in minutes.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    title: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    date: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    time: str = Field(default="", max_length=MAX_FIELD_LENGTH)
    recurrence: str | None = Field(default=None, max_length=MAX_FIELD_LENGTH)
    alarm: int | None = Field(default=None, ge=0)

    @field_validator("title", "date", "time", mode="before")
    @classmethod
    def _null_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class Event(BaseModel):
    """A single event recognized from free text.

    Attributes:
        id: Opaque identifier, unique within one recognition batch.
            Assigned locally, never supplied by the completion service.
        title: Display title of the event.
        date: Calendar date, logically ``YYYY-MM-DD``.
        time: Time of day, logically ``HH:MM`` (24-hour).
        recurrence: iCalendar ``RRULE`` value passed through verbatim, or
            ``None`` for a one-off event.
        alarm: Minutes before the start at which a reminder fires, or
            ``None`` for no reminder.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: str
    title: str
    date: str
    time: str
    recurrence: str | None = None
    alarm: int | None = Field(default=None, ge=0)

    def describe(self) -> str:
        """One-line human summary, e.g. ``"Standup on 2026-03-10 at 09:00"``."""
        return f"{self.title} on {self.date} at {self.time}"


@dataclass(frozen=True)
class CalendarFile:
    """An encoded calendar ready to be saved or downloaded.

    Attributes:
        content: The calendar document as UTF-8 bytes.
        filename: Suggested file name.
        media_type: MIME type including the charset.
    """

    content: bytes
    filename: str = ICS_FILENAME
    media_type: str = ICS_MEDIA_TYPE

    def write_to(self, directory: str | Path) -> Path:
        """Write the payload into *directory* under :attr:`filename`.

        Args:
            directory: Target directory; created if it does not exist.

        Returns:
            The path of the written file.
        """
        target_dir = Path(directory)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / self.filename
        path.write_bytes(self.content)
        return path
