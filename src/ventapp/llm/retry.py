"""Retry, timeout and error-classification policy for completion calls.

Everything here is a pure function of (attempt number, error) so the
transport's state machine stays a thin loop over these decisions.
"""

from dataclasses import dataclass
from typing import Any

import httpx

from ventapp.errors import ErrorKind

RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {ErrorKind.TIMEOUT, ErrorKind.NETWORK_ERROR}
)

MAX_ERROR_MESSAGE_LENGTH = 500


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with linear backoff and a per-attempt deadline."""

    max_attempts: int = 3
    attempt_timeout_s: float = 8.0
    backoff_base_s: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.attempt_timeout_s <= 0:
            raise ValueError("attempt_timeout_s must be > 0")
        if self.backoff_base_s < 0:
            raise ValueError("backoff_base_s must be >= 0")

    @classmethod
    def from_millis(
        cls,
        max_attempts: int,
        attempt_timeout_ms: int,
        backoff_base_ms: int,
    ) -> "RetryPolicy":
        return cls(
            max_attempts=max_attempts,
            attempt_timeout_s=attempt_timeout_ms / 1000,
            backoff_base_s=backoff_base_ms / 1000,
        )

    def should_retry(self, attempt: int, kind: ErrorKind) -> bool:
        """Whether a failed attempt number *attempt* is followed by another."""
        return is_retryable(kind) and attempt < self.max_attempts

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to sleep after failed attempt *attempt* (1-based)."""
        return self.backoff_base_s * attempt


def is_retryable(kind: ErrorKind) -> bool:
    """Only transport-level failures are retried; application errors are not."""
    return kind in RETRYABLE_KINDS


def classify_exception(exc: BaseException) -> ErrorKind:
    """Map an exception raised by an attempt to an ErrorKind.

    httpx.TimeoutException is a TransportError subclass, so it is
    checked first.
    """
    if isinstance(exc, TimeoutError | httpx.TimeoutException):
        return ErrorKind.TIMEOUT
    if isinstance(exc, httpx.TransportError):
        return ErrorKind.NETWORK_ERROR
    return ErrorKind.UNKNOWN


def extract_error_message(status_code: int, body: Any, text: str = "") -> str:
    """Pull a human-readable message out of an upstream error response.

    Understands the OpenAI/OpenRouter shape ``{"error": {"message": ...}}``
    as well as flat ``error``/``message``/``detail`` strings. Falls back to
    the raw response text, then to the status code.
    """
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()[:MAX_ERROR_MESSAGE_LENGTH]
        if isinstance(error, str) and error.strip():
            return error.strip()[:MAX_ERROR_MESSAGE_LENGTH]
        for key in ("message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()[:MAX_ERROR_MESSAGE_LENGTH]
    if text.strip():
        return text.strip()[:MAX_ERROR_MESSAGE_LENGTH]
    return f"HTTP {status_code}"
