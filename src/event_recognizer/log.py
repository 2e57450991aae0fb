"""Logging setup for event-recognizer.

All modules log through the stdlib :mod:`logging` tree under
``event_recognizer.*``.  :func:`setup_logging` attaches one stderr handler
to the root logger using a pipe-separated format with ISO 8601 timestamps.
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Marks the handler we own so repeated setup calls reuse it.
_HANDLER_ATTR = "_event_recognizer_handler"

# HTTP chatter from the Gemini SDK stack; kept at WARNING unless debugging.
_NOISY_LOGGERS = ("httpx", "httpcore", "google_genai")


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger for console output.

    Safe to call more than once: the handler is attached on the first call
    and only its level is updated afterwards.  Below ``DEBUG`` the SDK's
    HTTP loggers are capped at ``WARNING`` so request lines do not drown
    out recognizer messages.

    Args:
        level: A standard logging level name such as ``"DEBUG"`` or
            ``"INFO"`` (case-insensitive).

    Raises:
        ValueError: If *level* is not a recognised logging level name.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    sdk_level = logging.NOTSET if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)

    existing = [h for h in root.handlers if getattr(h, _HANDLER_ATTR, False)]
    if existing:
        existing[0].setLevel(numeric_level)
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)
