"""Encode recognized events as a minimal iCalendar document.

Output layout (lines joined with ``\\n``, no trailing newline)::

    BEGIN:VCALENDAR
    VERSION:2.0
    PRODID:<product id>
    BEGIN:VEVENT            -- one block per selected event, input order
    SUMMARY:<title>
    DTSTART:<YYYYMMDD>T<HHMM>00
    RRULE:<recurrence>      -- only when a recurrence is set
    BEGIN:VALARM            -- only when an alarm is set
    ACTION:DISPLAY
    TRIGGER:-PT<alarm>M
    END:VALARM
    END:VEVENT
    END:VCALENDAR

Titles and recurrence rules are written verbatim with no escaping or
folding; text containing line breaks will break the block structure.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable

from event_recognizer.models.event import CalendarFile, Event

logger = logging.getLogger(__name__)

DEFAULT_PRODUCT_ID = "-//hacksw/handcal//NONSGML v1.0//EN"

_LINE_SEPARATOR = "\n"


def encode(
    events: Iterable[Event],
    selected: Collection[str],
    product_id: str = DEFAULT_PRODUCT_ID,
) -> str:
    """Build the calendar document for the selected events.

    Args:
        events: Events in display order.
        selected: Ids of the events to include.  Ids not present in
            *events* are ignored.
        product_id: Value of the ``PRODID`` header line.

    Returns:
        The calendar document.  With nothing selected it holds only the
        header and footer lines.
    """
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", f"PRODID:{product_id}"]
    for event in events:
        if event.id in selected:
            lines.extend(_event_block(event))
    lines.append("END:VCALENDAR")
    return _LINE_SEPARATOR.join(lines)


def format_dtstart(date: str, time: str) -> str:
    """Compact ``YYYY-MM-DD`` / ``HH:MM`` into ``YYYYMMDDTHHMM00``.

    Separators are stripped, nothing is validated.
    """
    return f"{date.replace('-', '')}T{time.replace(':', '')}00"


def to_calendar_file(document: str) -> CalendarFile:
    """Wrap a calendar document as a UTF-8 :class:`CalendarFile`."""
    return CalendarFile(content=document.encode("utf-8"))


def export_calendar(
    events: Iterable[Event],
    selected: Collection[str],
    product_id: str = DEFAULT_PRODUCT_ID,
) -> CalendarFile:
    """Encode the selected events and wrap them for download.

    Args:
        events: Events in display order.
        selected: Ids of the events to include.
        product_id: Value of the ``PRODID`` header line.

    Returns:
        A :class:`CalendarFile` named ``events.ics`` with media type
        ``text/calendar; charset=utf-8``.
    """
    events = list(events)
    calendar_file = to_calendar_file(encode(events, selected, product_id))
    logger.info(
        "Exported %d of %d event(s) to %s (%d bytes)",
        sum(1 for event in events if event.id in selected),
        len(events),
        calendar_file.filename,
        len(calendar_file.content),
    )
    return calendar_file


def _event_block(event: Event) -> list[str]:
    block = [
        "BEGIN:VEVENT",
        f"SUMMARY:{event.title}",
        f"DTSTART:{format_dtstart(event.date, event.time)}",
    ]
    if event.recurrence:
        block.append(f"RRULE:{event.recurrence}")
    if event.alarm is not None:
        block.extend(
            [
                "BEGIN:VALARM",
                "ACTION:DISPLAY",
                f"TRIGGER:-PT{event.alarm}M",
                "END:VALARM",
            ]
        )
    block.append("END:VEVENT")
    return block
