"""Gemini completion client for event recognition.

Wraps the Google ``google-genai`` SDK.  The instruction preamble and the
user's text are sent to Gemini, the streamed response is accumulated in
full, and only then handed to the response parser; parsing is never
incremental.
"""

from __future__ import annotations

import logging

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from event_recognizer.exceptions import ExtractionError
from event_recognizer.models.event import Event
from event_recognizer.prompts import SYSTEM_INSTRUCTION, build_user_prompt
from event_recognizer.response_parser import IdFactory, parse

logger = logging.getLogger(__name__)


class GeminiClient:
    """Client for recognizing events via Google Gemini.

    Args:
        api_key: Google Gemini API key.
        model: Model identifier to use for generation.  Defaults to
            ``"gemini-2.0-flash"``.
        timeout_ms: Upper bound for one request in milliseconds.  ``None``
            leaves the SDK default (no explicit timeout).
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        timeout_ms: int | None = None,
    ) -> None:
        http_options = (
            genai_types.HttpOptions(timeout=timeout_ms) if timeout_ms is not None else None
        )
        self._client = genai.Client(api_key=api_key, http_options=http_options)
        self._model = model

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def complete(self, prompt: str) -> str:
        """Send *prompt* with the recognition instruction and return the text.

        The response is streamed; chunks are concatenated until the stream
        ends.

        Args:
            prompt: The user's free-text event description.

        Returns:
            The full response text (possibly empty).

        Raises:
            ExtractionError: If the Gemini API call fails, times out or
                cannot reach the service, including failures partway
                through the stream.
        """
        config = genai_types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
        )
        user_prompt = build_user_prompt(prompt)
        logger.debug("User prompt sent to Gemini:\n%s", user_prompt)

        parts: list[str] = []
        try:
            stream = self._client.models.generate_content_stream(
                model=self._model,
                contents=user_prompt,
                config=config,
            )
            for chunk in stream:
                if chunk.text:
                    parts.append(chunk.text)
        except genai_errors.APIError as exc:
            logger.error("Gemini API error: %s", exc)
            raise ExtractionError(f"Gemini API call failed: {exc}") from exc
        except httpx.TimeoutException as exc:
            logger.error("Gemini API call timed out: %s", exc)
            raise ExtractionError("Gemini API call timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("Gemini API connection failed: %s", exc)
            raise ExtractionError(f"Gemini API connection failed: {exc}") from exc

        raw_text = "".join(parts)
        logger.debug("Raw Gemini response (%d chunk(s)):\n%s", len(parts), raw_text)
        return raw_text

    def recognize_events(
        self,
        prompt: str,
        id_factory: IdFactory | None = None,
    ) -> list[Event]:
        """Recognize events in *prompt*.

        Args:
            prompt: The user's free-text event description.
            id_factory: Optional id generator passed to the parser.

        Returns:
            The recognized events, in response order.

        Raises:
            ExtractionError: If the API call fails.
            MalformedResponseError: If the response is not a valid event
                array.
        """
        events = parse(self.complete(prompt), id_factory=id_factory)
        for event in events:
            logger.info(
                "Recognized event: '%s' | %s %s | recurrence=%s | alarm=%s",
                event.title,
                event.date,
                event.time,
                event.recurrence,
                event.alarm,
            )
        return events
