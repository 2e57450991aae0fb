"""Recognition session: the single foreground flow.

A :class:`RecognizerSession` owns the state that lives for one user
session -- the current event list, the selection set and the rate
governor -- and wires the components together:

1. **Input check** -- reject text longer than the policy allows.
2. **Governor** -- deny the call if the session is throttled.
3. **Complete** -- fetch the full completion text upstream.
4. **Parse** -- build the event batch; on success it replaces the current
   list and the selection resets to all events.

A failed recognition (malformed response or upstream failure) leaves the
previous list and selection untouched.  Nothing is persisted.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Protocol

from event_recognizer.calendar_encoder import DEFAULT_PRODUCT_ID, export_calendar
from event_recognizer.exceptions import (
    ExtractionError,
    ExtractionInProgressError,
    InputTooLongError,
    MalformedResponseError,
)
from event_recognizer.models.event import CalendarFile, Event
from event_recognizer.rate_governor import DEFAULT_POLICY, RateGovernor, RatePolicy
from event_recognizer.response_parser import IdFactory, parse
from event_recognizer.selection import Selection, count_selected, select_all, toggle

logger = logging.getLogger(__name__)


class Completer(Protocol):
    """Anything that turns a prompt into the full completion text."""

    def complete(self, prompt: str) -> str: ...


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RecognizerSession:
    """State and operations for one recognition session.

    Args:
        completer: Upstream completion boundary, e.g.
            :class:`~event_recognizer.llm.GeminiClient`.
        policy: Rate and input limits.
        product_id: ``PRODID`` written into exported calendars.
        clock: Returns the current time in milliseconds.  Defaults to a
            monotonic clock.
        id_factory_maker: Builds a fresh id generator per batch.  Defaults
            to the parser's batch generator.
    """

    def __init__(
        self,
        completer: Completer,
        policy: RatePolicy = DEFAULT_POLICY,
        product_id: str = DEFAULT_PRODUCT_ID,
        clock: Callable[[], float] = _monotonic_ms,
        id_factory_maker: Callable[[], IdFactory] | None = None,
    ) -> None:
        self._completer = completer
        self._policy = policy
        self._governor = RateGovernor(policy)
        self._product_id = product_id
        self._clock = clock
        self._id_factory_maker = id_factory_maker
        self._events: list[Event] = []
        self._selection: Selection = frozenset()
        self._busy = False

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def events(self) -> list[Event]:
        """Events from the latest successful recognition (a copy)."""
        return list(self._events)

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def selected_count(self) -> int:
        return count_selected(self._events, self._selection)

    @property
    def is_busy(self) -> bool:
        """``True`` while a recognition call is in flight."""
        return self._busy

    @property
    def governor(self) -> RateGovernor:
        return self._governor

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def recognize(self, text: str, current_time: float | None = None) -> list[Event]:
        """Recognize events in *text* and make them the current result.

        Args:
            text: Free-text event description.
            current_time: Timestamp in milliseconds for the governor;
                defaults to the session clock.

        Returns:
            The newly recognized events.

        Raises:
            InputTooLongError: If *text* exceeds the input limit.
            RateLimitedError: If the governor denies the call.
            ExtractionInProgressError: If a recognition is already running.
            ExtractionError: If the upstream call fails.
            MalformedResponseError: If the response is not a valid batch.
        """
        if len(text) > self._policy.max_input_length:
            logger.warning(
                "Rejected input of %d characters (limit %d)",
                len(text),
                self._policy.max_input_length,
            )
            raise InputTooLongError(len(text), self._policy.max_input_length)

        if self._busy:
            raise ExtractionInProgressError("A recognition request is already in progress")

        now = self._clock() if current_time is None else current_time
        self._governor.check(now)

        self._busy = True
        try:
            raw_text = self._completer.complete(text)
            id_factory = self._id_factory_maker() if self._id_factory_maker else None
            events = parse(raw_text, id_factory=id_factory)
        except MalformedResponseError as exc:
            logger.warning("Could not parse recognized events, keeping previous result: %s", exc)
            logger.debug("Rejected response: %s", exc.raw_response)
            raise
        except ExtractionError as exc:
            logger.error("Recognition failed, keeping previous result: %s", exc)
            raise
        finally:
            self._busy = False

        self._events = events
        self._selection = select_all(events)
        logger.info("Recognized %d event(s); all selected", len(events))
        return list(events)

    def toggle(self, event_id: str) -> Selection:
        """Flip whether *event_id* is selected and return the new selection.

        Raises:
            KeyError: If *event_id* is not one of the current events.
        """
        if not any(event.id == event_id for event in self._events):
            raise KeyError(event_id)
        self._selection = toggle(self._selection, event_id)
        return self._selection

    def export(self) -> CalendarFile:
        """Encode the selected events as a downloadable calendar file."""
        return export_calendar(self._events, self._selection, self._product_id)
