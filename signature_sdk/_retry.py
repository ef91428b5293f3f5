from __future__ import annotations

import typing as tp
from dataclasses import dataclass

from ._exceptions import ApiError
from ._headers import parse_retry_after

__all__ = (
    "DEFAULT_MAX_ATTEMPTS",
    "RetryDecision",
    "RetryPolicy",
    "RetryState",
    "backoff_delay",
    "fibonacci",
    "retry_after_delay",
)

DEFAULT_MAX_ATTEMPTS = 5


def fibonacci(n: int) -> int:
    """
    Fibonacci numbers starting at ``F(0) = F(1) = 1``.

    Examples:
        >>> [fibonacci(n) for n in range(6)]
        [1, 1, 2, 3, 5, 8]
    """
    if n <= 1:
        return 1
    a, b = 1, 1
    for _ in range(2, n + 1):
        a, b = b, a + b
    return b


def backoff_delay(attempt: int) -> int:
    """
    Delay in milliseconds before the ``attempt``-th retry (1-based).

    The first retry waits one second, then 1s, 2s, 3s, 5s, ...
    """
    return fibonacci(max(attempt, 1) - 1) * 1000


def retry_after_delay(headers: tp.Mapping[str, str], now: tp.Optional[float] = None) -> tp.Optional[int]:
    seconds = parse_retry_after(headers.get("retry-after"), now=now)
    if seconds is None:
        return None
    return int(seconds * 1000)


@dataclass
class RetryState:
    """Attempt bookkeeping for one logical request, shared by all of its replays."""

    attempt: int = 0
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    classification: tp.Optional[str] = None

    def record(self, error: ApiError) -> int:
        self.attempt += 1
        if self.classification is None:
            self.classification = classify(error)
        return self.attempt


@dataclass(frozen=True)
class RetryDecision:
    retry: bool
    delay_ms: int = 0


def classify(error: ApiError) -> str:
    if error.is_network_error():
        return "network"
    if error.is_rate_limit_error():
        return "rate_limit"
    if error.is_server_error():
        return "server"
    return "other"


class RetryPolicy:
    """
    Decides whether a failed request is attempted again and how long to wait.

    Only retryable errors (network failures, 429, 502, 503 and 504) are
    retried, at most ``max_attempts`` times. Requests replayed after a token
    refresh are never retried. A 429 carrying ``Retry-After`` waits for the
    server supplied delay; every other retry follows a Fibonacci backoff.
    """

    def __init__(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        if max_attempts < 0:
            raise ValueError("max_attempts must not be negative")
        self.max_attempts = max_attempts

    def should_retry(
        self,
        error: ApiError,
        attempt_count: int,
        max_attempts: tp.Optional[int] = None,
        is_replay: bool = False,
    ) -> RetryDecision:
        limit = self.max_attempts if max_attempts is None else max_attempts
        if not error.is_retryable() or attempt_count >= limit or is_replay:
            return RetryDecision(retry=False)

        return RetryDecision(retry=True, delay_ms=self.delay_for(error, attempt_count + 1))

    def delay_for(self, error: ApiError, attempt: int) -> int:
        if error.is_rate_limit_error() and error.response is not None:
            delay = retry_after_delay(error.response.headers)
            if delay is not None:
                return delay
        return backoff_delay(attempt)

    def new_state(self) -> RetryState:
        return RetryState(max_attempts=self.max_attempts)
