"""Response parser for completion-service output.

Turns the fully accumulated completion text into validated
:class:`~event_recognizer.models.event.Event` records.  The text must be a
raw JSON array of event objects; markdown fences or surrounding prose are
rejected.  The payload is treated as untrusted input and validated against
:class:`~event_recognizer.models.event.ResponseEvent` (element types, array
size and string lengths) before any record is built.  Any violation
rejects the entire batch.
"""

from __future__ import annotations

import itertools
import json
import logging
import secrets
from collections.abc import Callable, Iterator
from typing import Annotated

from pydantic import Field, TypeAdapter, ValidationError

from event_recognizer.exceptions import MalformedResponseError
from event_recognizer.models.event import (
    MAX_EVENTS,
    MAX_FIELD_LENGTH,
    Event,
    ResponseEvent,
)

logger = logging.getLogger(__name__)

__all__ = [
    "MAX_EVENTS",
    "MAX_FIELD_LENGTH",
    "IdFactory",
    "batch_id_factory",
    "parse",
]

IdFactory = Callable[[], str]

_BATCH_ADAPTER: TypeAdapter[list[ResponseEvent]] = TypeAdapter(
    Annotated[list[ResponseEvent], Field(max_length=MAX_EVENTS)]
)


def batch_id_factory() -> IdFactory:
    """Return a generator of ids unique within one recognition batch.

    Ids combine a random batch token with a monotonic counter, e.g.
    ``"3f9c1a2b-1"``, ``"3f9c1a2b-2"``, so two events in the same batch
    can never collide.
    """
    token = secrets.token_hex(4)
    counter: Iterator[int] = itertools.count(1)
    return lambda: f"{token}-{next(counter)}"


def parse(raw_text: str, id_factory: IdFactory | None = None) -> list[Event]:
    """Parse completion text into a list of events.

    Args:
        raw_text: The complete completion response.  Must be a JSON array
            of objects carrying ``title``, ``date`` and ``time`` and
            optionally ``recurrence`` and ``alarm``.
        id_factory: Callable returning a fresh id per event.  Defaults to
            a new :func:`batch_id_factory` for this call.

    Returns:
        One :class:`Event` per array element, in array order.  Missing
        ``title``/``date``/``time`` become empty strings; unknown keys are
        ignored.

    Raises:
        MalformedResponseError: If the text is not valid JSON, the top
            level is not an array, or any element fails validation.  No
            partial result is returned.
    """
    if raw_text is None or not raw_text.strip():
        raise MalformedResponseError("Empty response", raw_response=raw_text or "")

    try:
        data = json.loads(raw_text)
    except (ValueError, RecursionError) as exc:
        # ValueError covers JSONDecodeError and over-long integer literals;
        # RecursionError covers pathologically deep nesting.
        raise MalformedResponseError(
            f"Invalid JSON: {exc.__class__.__name__}: {exc}", raw_response=raw_text
        ) from exc

    if not isinstance(data, list):
        raise MalformedResponseError(
            f"Expected a JSON array of events, got {type(data).__name__}",
            raw_response=raw_text,
        )

    # Validate the whole batch before drawing ids so a bad element late in
    # the array leaves nothing behind.
    try:
        records = _BATCH_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise MalformedResponseError(
            _describe_validation_error(exc), raw_response=raw_text
        ) from exc

    next_id = id_factory or batch_id_factory()
    events = [Event(id=next_id(), **record.model_dump()) for record in records]

    logger.debug("Parsed %d event(s) from completion response", len(events))
    return events


def _describe_validation_error(exc: ValidationError) -> str:
    """Summarise the first validation error as ``Event <n>: '<field>' <msg>``."""
    errors = exc.errors(include_url=False)
    first = errors[0]
    loc = first["loc"]
    if not loc:
        message = f"Response rejected: {first['msg']}"
    elif len(loc) == 1:
        message = f"Event {loc[0]}: {first['msg']}"
    else:
        message = f"Event {loc[0]}: '{loc[1]}' {first['msg']}"
    if len(errors) > 1:
        message += f" (and {len(errors) - 1} more error(s))"
    return message
