"""Tests for the recognition session flow.

The completion boundary is replaced with a scripted fake, so these tests
cover input checks, governor gating, result replacement, selection reset,
failure handling, the in-flight guard and export.
"""

from __future__ import annotations

import json

import pytest

from event_recognizer.exceptions import (
    ExtractionError,
    ExtractionInProgressError,
    InputTooLongError,
    MalformedResponseError,
    RateLimitedError,
)
from event_recognizer.rate_governor import RatePolicy
from event_recognizer.session import RecognizerSession

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class FakeCompleter:
    """Returns scripted responses in order; exceptions are raised."""

    def __init__(self, *responses: str | Exception) -> None:
        self._responses = list(responses)
        self.prompts: list[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _response(*titles: str, **extra: object) -> str:
    return json.dumps(
        [{"title": t, "date": "2026-04-01", "time": "10:00", **extra} for t in titles]
    )


def _session(completer: FakeCompleter, **kwargs: object) -> RecognizerSession:
    clock_value = iter(range(0, 10_000_000, 1_000))
    kwargs.setdefault("clock", lambda: float(next(clock_value)))
    return RecognizerSession(completer, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Happy path
# ---------------------------------------------------------------------------


class TestRecognize:
    def test_events_become_current_and_all_selected(self) -> None:
        session = _session(FakeCompleter(_response("Dentist", "Gym")))

        events = session.recognize("dentist tomorrow at 10, gym after")

        assert [e.title for e in events] == ["Dentist", "Gym"]
        assert session.events == events
        assert session.selection == frozenset(e.id for e in events)
        assert session.selected_count == 2

    def test_prompt_is_forwarded_unchanged(self) -> None:
        completer = FakeCompleter(_response("A"))
        session = _session(completer)

        session.recognize("Lunch with Sam on Friday at noon")

        assert completer.prompts == ["Lunch with Sam on Friday at noon"]

    def test_new_result_replaces_old_and_resets_selection(self) -> None:
        session = _session(FakeCompleter(_response("A", "B"), _response("C")))
        first = session.recognize("first")
        session.toggle(first[0].id)

        second = session.recognize("second")

        assert [e.title for e in session.events] == ["C"]
        assert session.selection == frozenset({second[0].id})

    def test_custom_id_factory_maker(self) -> None:
        session = _session(
            FakeCompleter(_response("A", "B")),
            id_factory_maker=lambda: iter(["x", "y"]).__next__,
        )

        events = session.recognize("text")

        assert [e.id for e in events] == ["x", "y"]

    def test_events_property_is_a_copy(self) -> None:
        session = _session(FakeCompleter(_response("A")))
        session.recognize("text")

        session.events.clear()

        assert len(session.events) == 1


# ---------------------------------------------------------------------------
# Input and governor checks
# ---------------------------------------------------------------------------


class TestGuards:
    def test_input_too_long_rejected_before_upstream(self) -> None:
        completer = FakeCompleter(_response("A"))
        session = _session(completer)

        with pytest.raises(InputTooLongError) as exc_info:
            session.recognize("x" * 501)

        assert exc_info.value.length == 501
        assert exc_info.value.limit == 500
        assert completer.prompts == []
        assert session.governor.state.request_count == 0

    def test_input_at_limit_accepted(self) -> None:
        session = _session(FakeCompleter(_response("A")))

        assert len(session.recognize("x" * 500)) == 1

    def test_rate_limited_makes_no_upstream_call(self) -> None:
        completer = FakeCompleter(_response("A"), _response("B"))
        session = _session(completer, policy=RatePolicy(max_requests=1, window_ms=60_000))
        session.recognize("one", current_time=0)

        with pytest.raises(RateLimitedError):
            session.recognize("two", current_time=1_000)

        assert completer.prompts == ["one"]
        assert [e.title for e in session.events] == ["A"]

    def test_rate_limit_recovers_after_window(self) -> None:
        completer = FakeCompleter(_response("A"), _response("B"))
        session = _session(completer, policy=RatePolicy(max_requests=1, window_ms=60_000))
        session.recognize("one", current_time=0)

        session.recognize("two", current_time=60_000)

        assert [e.title for e in session.events] == ["B"]

    def test_in_flight_call_blocks_another(self) -> None:
        session: RecognizerSession

        class ReentrantCompleter:
            def __init__(self) -> None:
                self.inner_error: Exception | None = None

            def complete(self, prompt: str) -> str:
                assert session.is_busy
                try:
                    session.recognize("nested")
                except ExtractionInProgressError as exc:
                    self.inner_error = exc
                return _response("Outer")

        completer = ReentrantCompleter()
        session = RecognizerSession(completer, clock=lambda: 0.0)

        session.recognize("outer")

        assert isinstance(completer.inner_error, ExtractionInProgressError)
        assert not session.is_busy
        assert session.governor.state.request_count == 1


# ---------------------------------------------------------------------------
# Failures keep the previous result
# ---------------------------------------------------------------------------


class TestFailures:
    def test_malformed_keeps_previous_result(self) -> None:
        session = _session(FakeCompleter(_response("A", "B"), "not json"))
        events = session.recognize("first")
        session.toggle(events[1].id)

        with pytest.raises(MalformedResponseError):
            session.recognize("second")

        assert session.events == events
        assert session.selection == frozenset({events[0].id})
        assert not session.is_busy

    def test_upstream_error_keeps_previous_result(self) -> None:
        session = _session(
            FakeCompleter(_response("A"), ExtractionError("Gemini API call failed"))
        )
        events = session.recognize("first")

        with pytest.raises(ExtractionError):
            session.recognize("second")

        assert session.events == events
        assert not session.is_busy

    def test_retry_after_failure_succeeds(self) -> None:
        session = _session(FakeCompleter("[oops", _response("A")))

        with pytest.raises(MalformedResponseError):
            session.recognize("first")

        assert [e.title for e in session.recognize("again")] == ["A"]


# ---------------------------------------------------------------------------
# Toggle and export
# ---------------------------------------------------------------------------


class TestToggleAndExport:
    def test_toggle_unknown_id_raises(self) -> None:
        session = _session(FakeCompleter(_response("A")))
        session.recognize("text")

        with pytest.raises(KeyError):
            session.toggle("nope")

    def test_export_only_selected(self) -> None:
        session = _session(FakeCompleter(_response("Keep", "Drop")))
        events = session.recognize("text")
        session.toggle(events[1].id)

        document = session.export().content.decode("utf-8")

        assert "SUMMARY:Keep" in document
        assert "SUMMARY:Drop" not in document

    def test_export_before_recognize_is_empty_calendar(self) -> None:
        session = _session(FakeCompleter())

        document = session.export().content.decode("utf-8")

        assert document == (
            "BEGIN:VCALENDAR\nVERSION:2.0\n"
            "PRODID:-//hacksw/handcal//NONSGML v1.0//EN\nEND:VCALENDAR"
        )

    def test_export_uses_product_id(self) -> None:
        session = _session(FakeCompleter(), product_id="-//acme//x//EN")

        assert b"PRODID:-//acme//x//EN" in session.export().content
