"""Custom exceptions for the event-recognizer pipeline.

All errors raised by the recognition flow are non-fatal to the process:
the caller reports them to the user, who may retry immediately (subject to
the rate governor).

Exception hierarchy::

    EventRecognizerError          (base for all recognizer errors)
    +-- MalformedResponseError    (completion text is not a JSON event array)
    +-- ExtractionError           (upstream completion call failed)
    +-- RateLimitedError          (rate governor denied the call)
    +-- InputTooLongError         (input text exceeds the length limit)
    +-- ExtractionInProgressError (another extraction is still running)
"""

from __future__ import annotations


class EventRecognizerError(Exception):
    """Base exception for event-recognizer errors."""


class MalformedResponseError(EventRecognizerError):
    """Raised when the completion response cannot be parsed or validated.

    Covers JSON decode failures, a non-array top level, and elements that
    fail the boundary checks.  The whole batch is rejected.

    Attributes:
        raw_response: The raw completion text that failed to parse.
    """

    def __init__(self, message: str, raw_response: str = "") -> None:
        super().__init__(message)
        self.raw_response = raw_response


class ExtractionError(EventRecognizerError):
    """Raised when the completion service cannot produce a response at all.

    Covers connectivity errors, authentication failures and timeouts.
    """


class RateLimitedError(EventRecognizerError):
    """Raised when the rate governor denies an extraction request.

    Attributes:
        retry_after_ms: Milliseconds until the window elapses, or ``None``
            if unknown.
    """

    def __init__(
        self,
        message: str = "Too many requests, please wait before trying again",
        retry_after_ms: float | None = None,
    ) -> None:
        super().__init__(message)
        self.retry_after_ms = retry_after_ms


class InputTooLongError(EventRecognizerError):
    """Raised when the natural-language input exceeds the length limit.

    Attributes:
        length: Length of the rejected input in characters.
        limit: Maximum accepted length in characters.
    """

    def __init__(self, length: int, limit: int) -> None:
        super().__init__(
            f"Input is {length} characters long; the limit is {limit}"
        )
        self.length = length
        self.limit = limit


class ExtractionInProgressError(EventRecognizerError):
    """Raised when an extraction is requested while another is in flight."""
