"""Rate governor gating how often extraction may run in a session.

A two-state machine over :class:`RateState`:

- **Open** (``request_count < max_requests``): every call is admitted,
  bumping the count and recording its timestamp.  The call that reaches
  the maximum is still admitted.
- **Throttled** (``request_count >= max_requests``): calls are denied until
  ``window_ms`` has elapsed since the last admitted call; the first call
  after that resets the count and is evaluated as Open.

This is a sliding checkpoint, not a true sliding window: the cooldown runs
from the call that tripped the limit.

:func:`admit` is pure.  :class:`RateGovernor` holds the state for one
session and raises :class:`~event_recognizer.exceptions.RateLimitedError`
on denial.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from event_recognizer.exceptions import RateLimitedError

logger = logging.getLogger(__name__)

MAX_REQUESTS_PER_WINDOW = 8
WINDOW_MS = 60_000
MAX_INPUT_LENGTH = 500


@dataclass(frozen=True)
class RatePolicy:
    """Limits applied to one session.

    Attributes:
        max_requests: Admitted calls before the session is throttled.
        window_ms: Cooldown in milliseconds, measured from the last
            admitted call.
        max_input_length: Longest input text accepted, in characters.
            Checked by the caller before :func:`admit`.
    """

    max_requests: int = MAX_REQUESTS_PER_WINDOW
    window_ms: float = WINDOW_MS
    max_input_length: int = MAX_INPUT_LENGTH


DEFAULT_POLICY = RatePolicy()


@dataclass(frozen=True)
class RateState:
    """Per-session rate counters.

    Attributes:
        request_count: Admitted calls since the last reset.
        last_request_time: Timestamp (ms) of the latest admitted call, or
            ``None`` before the first one.
    """

    request_count: int = 0
    last_request_time: float | None = None

    def is_throttled(self, policy: RatePolicy = DEFAULT_POLICY) -> bool:
        return self.request_count >= policy.max_requests


@dataclass(frozen=True)
class Admission:
    """Outcome of :func:`admit`.

    Attributes:
        allowed: Whether the call may proceed upstream.
        state: State after the decision (unchanged on denial).
        reason: Human-readable denial reason, ``None`` when allowed.
        retry_after_ms: Time left in the cooldown when denied.
    """

    allowed: bool
    state: RateState
    reason: str | None = None
    retry_after_ms: float | None = None


def admit(
    state: RateState,
    current_time: float,
    policy: RatePolicy = DEFAULT_POLICY,
) -> Admission:
    """Decide whether an extraction call may proceed.

    Args:
        state: Current session state.
        current_time: Current timestamp in milliseconds.
        policy: Limits to apply.

    Returns:
        An :class:`Admission` carrying the decision and the new state.
    """
    if state.is_throttled(policy):
        last = state.last_request_time if state.last_request_time is not None else current_time
        elapsed = current_time - last
        if elapsed < policy.window_ms:
            return Admission(
                allowed=False,
                state=state,
                reason="Too many requests, please wait before trying again",
                retry_after_ms=policy.window_ms - elapsed,
            )
        state = RateState()

    return Admission(
        allowed=True,
        state=replace(
            state,
            request_count=state.request_count + 1,
            last_request_time=current_time,
        ),
    )


class RateGovernor:
    """Holds the rate state for one session.

    Args:
        policy: Limits to apply.  Defaults to :data:`DEFAULT_POLICY`.
    """

    def __init__(self, policy: RatePolicy = DEFAULT_POLICY) -> None:
        self._policy = policy
        self._state = RateState()

    @property
    def policy(self) -> RatePolicy:
        return self._policy

    @property
    def state(self) -> RateState:
        return self._state

    def check(self, current_time: float) -> None:
        """Admit a call at *current_time* (ms) or raise.

        Raises:
            RateLimitedError: If the session is throttled and the window
                has not elapsed.  The state is left unchanged.
        """
        admission = admit(self._state, current_time, self._policy)
        if not admission.allowed:
            logger.warning(
                "Extraction denied: %d request(s) in window, retry in %.0f ms",
                self._state.request_count,
                admission.retry_after_ms or 0,
            )
            raise RateLimitedError(
                admission.reason or "Rate limited",
                retry_after_ms=admission.retry_after_ms,
            )

        self._state = admission.state
        if self._state.is_throttled(self._policy):
            logger.info(
                "Request limit of %d reached; throttling for %d ms",
                self._policy.max_requests,
                self._policy.window_ms,
            )
