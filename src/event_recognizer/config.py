"""Configuration loading for event-recognizer.

Reads settings from environment variables (with .env support via python-dotenv)
and validates that required values are present and numeric limits are sane.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from event_recognizer.calendar_encoder import DEFAULT_PRODUCT_ID
from event_recognizer.rate_governor import (
    MAX_INPUT_LENGTH,
    MAX_REQUESTS_PER_WINDOW,
    WINDOW_MS,
    RatePolicy,
)


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        gemini_api_key: API key for Google Gemini.
        gemini_model: Model identifier used for recognition.
        log_level: Logging level (default ``"INFO"``).
        product_id: ``PRODID`` value written into exported calendars.
        request_timeout_ms: Upstream call timeout in milliseconds, or
            ``None`` to wait indefinitely.
        max_requests_per_window: Extractions admitted before throttling.
        window_ms: Cooldown window in milliseconds.
        max_input_length: Longest accepted input text, in characters.
    """

    gemini_api_key: str
    gemini_model: str = "gemini-2.0-flash"
    log_level: str = "INFO"
    product_id: str = DEFAULT_PRODUCT_ID
    request_timeout_ms: int | None = None
    max_requests_per_window: int = MAX_REQUESTS_PER_WINDOW
    window_ms: int = WINDOW_MS
    max_input_length: int = MAX_INPUT_LENGTH

    def __repr__(self) -> str:
        return (
            f"Settings(gemini_api_key='***', "
            f"gemini_model={self.gemini_model!r}, "
            f"log_level={self.log_level!r}, "
            f"product_id={self.product_id!r}, "
            f"request_timeout_ms={self.request_timeout_ms!r}, "
            f"max_requests_per_window={self.max_requests_per_window!r}, "
            f"window_ms={self.window_ms!r}, "
            f"max_input_length={self.max_input_length!r})"
        )

    @property
    def rate_policy(self) -> RatePolicy:
        """The :class:`RatePolicy` described by these settings."""
        return RatePolicy(
            max_requests=self.max_requests_per_window,
            window_ms=self.window_ms,
            max_input_length=self.max_input_length,
        )


_OPTIONAL_STRINGS = {
    "GEMINI_MODEL": "gemini_model",
    "LOG_LEVEL": "log_level",
    "PRODUCT_ID": "product_id",
}

_OPTIONAL_INTS = {
    "REQUEST_TIMEOUT_MS": "request_timeout_ms",
    "MAX_REQUESTS_PER_WINDOW": "max_requests_per_window",
    "WINDOW_MS": "window_ms",
    "MAX_INPUT_LENGTH": "max_input_length",
}


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the project root
    is picked up automatically.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If ``GEMINI_API_KEY`` is missing, empty, or
            whitespace-only, or if a numeric setting is not a positive
            integer.  The message names every offending variable.
    """
    load_dotenv()

    values: dict[str, object] = {}
    problems: list[str] = []

    api_key = os.environ.get("GEMINI_API_KEY", "")
    if not api_key.strip():
        raise ConfigError("Missing required environment variables: GEMINI_API_KEY")
    values["gemini_api_key"] = api_key

    for env_var, field_name in _OPTIONAL_STRINGS.items():
        raw = os.environ.get(env_var, "").strip()
        if raw:
            values[field_name] = raw

    for env_var, field_name in _OPTIONAL_INTS.items():
        raw = os.environ.get(env_var, "").strip()
        if not raw:
            continue
        try:
            number = int(raw)
        except ValueError:
            problems.append(env_var)
            continue
        if number <= 0:
            problems.append(env_var)
            continue
        values[field_name] = number

    if problems:
        names = ", ".join(problems)
        raise ConfigError(f"Environment variables must be positive integers: {names}")

    return Settings(**values)  # type: ignore[arg-type]
