"""Console output for recognized events.

Renders the current recognition result the way a user reviews it before
exporting: one numbered entry per event with a selection marker, the
recurrence rule and alarm when present, and a footer with the export
count.

:func:`format_events` returns the formatted string; :func:`print_events`
writes it to stdout.
"""

from __future__ import annotations

import sys
from collections.abc import Collection, Sequence
from pathlib import Path

from event_recognizer.models.event import Event

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH
_DIVIDER = "-" * _BANNER_WIDTH

NOTHING_SELECTED = "Nothing selected for export; no calendar written."


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def format_events(events: Sequence[Event], selected: Collection[str]) -> str:
    """Render recognized events as a numbered checklist.

    Example entry::

        [x] 1. Yoga on 2026-03-02 at 18:30
               Recurs: FREQ=WEEKLY;BYDAY=MO,WE,FR
               Alarm: 10 minutes before

    Args:
        events: Events in display order.
        selected: Ids of the selected events.

    Returns:
        A multi-line string ready for console display.
    """
    lines: list[str] = [_SEPARATOR, "  RECOGNIZED EVENTS", _SEPARATOR]

    if not events:
        lines.append("  No events recognized.")
    for position, event in enumerate(events, start=1):
        lines.extend(_format_entry(position, event, event.id in selected))

    count = sum(1 for event in events if event.id in selected)
    lines.append(_DIVIDER)
    lines.append(f"  Selected for export: {count} of {len(events)} event(s)")
    lines.append(_SEPARATOR)
    return "\n".join(lines)


def print_events(events: Sequence[Event], selected: Collection[str]) -> None:
    """Format and print recognized events to stdout."""
    sys.stdout.write(format_events(events, selected) + "\n")


def format_export(path: Path, count: int) -> str:
    """One-line confirmation for a written calendar file."""
    noun = "event" if count == 1 else "events"
    return f"Saved {count} {noun} to {path}"


# ---------------------------------------------------------------------------
# Internal formatters
# ---------------------------------------------------------------------------


def _format_entry(position: int, event: Event, is_selected: bool) -> list[str]:
    marker = "[x]" if is_selected else "[ ]"
    prefix = f"  {marker} {position}. "
    indent = " " * len(prefix)

    entry = [prefix + event.describe()]
    if event.recurrence:
        entry.append(f"{indent}Recurs: {event.recurrence}")
    if event.alarm is not None:
        entry.append(f"{indent}Alarm: {event.alarm} minutes before")
    return entry
