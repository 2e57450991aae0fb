"""Selection set helpers.

The selection is an immutable ``frozenset`` of event ids marking which
recognized events will be exported.  It resets to "all selected" whenever
a new recognition result replaces the current one and otherwise changes
only through :func:`toggle`.
"""

from __future__ import annotations

from collections.abc import Iterable

from event_recognizer.models.event import Event

Selection = frozenset[str]


def select_all(events: Iterable[Event]) -> Selection:
    """Return a selection containing every event id."""
    return frozenset(event.id for event in events)


def toggle(selection: Selection, event_id: str) -> Selection:
    """Return *selection* with *event_id* added if absent, removed if present."""
    if event_id in selection:
        return selection - {event_id}
    return selection | {event_id}


def count_selected(events: Iterable[Event], selection: Selection) -> int:
    """Number of *events* whose id is in *selection*."""
    return sum(1 for event in events if event.id in selection)
