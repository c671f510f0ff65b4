"""Resilient transport for the chat-completion endpoint.

Attempt state machine, one instance per ``send`` call:

    Attempting(1) -> ... -> Attempting(max_attempts)
         |  ok response          -> Done(RawResponse)
         |  non-2xx status       -> Failed(api_error)            (no retry)
         |  timeout / network    -> sleep(backoff) -> Attempting(n + 1)
         |  anything else        -> Failed(unknown)              (no retry)
    exhausted                    -> Failed(last error)

Each attempt runs under its own deadline; when it fires only that
attempt's in-flight request is cancelled.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
import structlog

from ventapp.errors import ErrorKind
from ventapp.llm.retry import RetryPolicy, classify_exception, extract_error_message
from ventapp.llm.schemas import CompletionFailure, RawResponse

logger = structlog.get_logger()

SleepFn = Callable[[float], Awaitable[None]]


class ResilientTransport:
    """POST JSON with per-attempt timeout, bounded retry and linear backoff.

    The transport keeps no per-call state: the attempt counter and the
    timer live inside ``send``, so concurrent calls are independent.
    The underlying ``httpx.AsyncClient`` is shared and owned by the caller.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: RetryPolicy | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._client = client
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    async def send(
        self,
        endpoint: str,
        headers: dict[str, str],
        body: dict[str, Any],
    ) -> RawResponse | CompletionFailure:
        """Execute the request, retrying only transport-level failures."""
        policy = self._policy
        failure = CompletionFailure(ErrorKind.UNKNOWN, "no attempt made")

        for attempt in range(1, policy.max_attempts + 1):
            try:
                response = await asyncio.wait_for(
                    self._client.post(endpoint, headers=headers, json=body),
                    timeout=policy.attempt_timeout_s,
                )
            except Exception as exc:
                kind = classify_exception(exc)
                failure = CompletionFailure(kind, self._describe(exc, kind))

                if kind == ErrorKind.UNKNOWN:
                    logger.error(
                        "completion_attempt_unexpected_error",
                        endpoint=endpoint,
                        attempt=attempt,
                        exc_info=exc,
                    )
                    return failure

                logger.warning(
                    "completion_attempt_failed",
                    endpoint=endpoint,
                    attempt=attempt,
                    max_attempts=policy.max_attempts,
                    kind=str(kind),
                    error=failure.message,
                )
                if not policy.should_retry(attempt, kind):
                    break
                await self._sleep(policy.backoff_delay(attempt))
                continue

            return self._finish(response, attempt)

        logger.error(
            "completion_attempts_exhausted",
            endpoint=endpoint,
            attempts=policy.max_attempts,
            kind=str(failure.kind),
        )
        return failure

    def _finish(
        self, response: httpx.Response, attempt: int
    ) -> RawResponse | CompletionFailure:
        """Turn a completed HTTP exchange into a raw response or failure."""
        body = self._decode_json(response)

        if not response.is_success:
            message = extract_error_message(response.status_code, body, response.text)
            logger.warning(
                "completion_api_error",
                status_code=response.status_code,
                attempt=attempt,
                error=message,
            )
            return CompletionFailure(ErrorKind.API_ERROR, message)

        if body is None:
            logger.warning(
                "completion_response_not_json",
                status_code=response.status_code,
                content_type=response.headers.get("content-type"),
            )
            return CompletionFailure(
                ErrorKind.MALFORMED_RESPONSE, "Response body is not valid JSON"
            )

        return RawResponse(status_code=response.status_code, body=body, attempts=attempt)

    @staticmethod
    def _decode_json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def _describe(self, exc: Exception, kind: ErrorKind) -> str:
        if kind == ErrorKind.TIMEOUT:
            return f"Request timed out after {self._policy.attempt_timeout_s:g}s"
        return str(exc) or type(exc).__name__
