"""PromptRouter -- builds the chat request for a complaint and interprets the reply.

No retry happens here; the transport owns every retry decision.
"""

from typing import Any

import structlog

from ventapp.errors import ErrorKind
from ventapp.i18n import Language
from ventapp.llm.prompts import SystemPromptTable
from ventapp.llm.schemas import (
    ChatCompletionBody,
    ChatMessage,
    CompletionFailure,
    CompletionRequest,
    CompletionResult,
    CompletionSuccess,
    RawResponse,
)
from ventapp.llm.transport import ResilientTransport

logger = structlog.get_logger()


class PromptRouter:
    """Routes one complaint to the completion endpoint.

    Args:
        transport: Resilient transport that executes the HTTP call.
        prompts: Total language -> system prompt table.
        endpoint: Full chat-completions URL.
        api_key: Bearer credential for the completion API.
        model: Model identifier sent in every request.
        site_url: Value of the HTTP-Referer identification header.
        app_title: Value of the X-Title identification header.
    """

    def __init__(
        self,
        transport: ResilientTransport,
        prompts: SystemPromptTable,
        *,
        endpoint: str,
        api_key: str,
        model: str,
        site_url: str,
        app_title: str,
    ) -> None:
        self._transport = transport
        self._prompts = prompts
        self._endpoint = endpoint
        self._model = model
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": site_url,
            "X-Title": app_title,
            "Content-Type": "application/json",
        }

    async def handle(
        self,
        complaint_text: str,
        language: Language = Language.ZH,
    ) -> CompletionResult:
        """Send a complaint and return the model's reply or a classified failure."""
        request = CompletionRequest(complaint_text=complaint_text, language=language)
        body = self.build_body(request)

        try:
            outcome = await self._transport.send(
                self._endpoint,
                dict(self._headers),
                body.model_dump(),
            )
        except Exception as exc:
            logger.error("completion_unexpected_error", exc_info=exc)
            return CompletionFailure(ErrorKind.UNKNOWN, str(exc) or type(exc).__name__)

        if isinstance(outcome, CompletionFailure):
            logger.warning(
                "completion_failed",
                language=str(language),
                kind=str(outcome.kind),
                error=outcome.message,
            )
            return outcome

        return self._interpret(outcome)

    def build_body(self, request: CompletionRequest) -> ChatCompletionBody:
        """System persona first, then the complaint verbatim."""
        return ChatCompletionBody(
            model=self._model,
            messages=[
                ChatMessage(
                    role="system",
                    content=self._prompts.for_language(request.language),
                ),
                ChatMessage(role="user", content=request.complaint_text),
            ],
        )

    @staticmethod
    def _interpret(response: RawResponse) -> CompletionResult:
        """Extract the first choice's text from a successful response."""
        body: Any = response.body

        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.warning("completion_error_payload", error=message)
            return CompletionFailure(ErrorKind.API_ERROR, message or "Upstream error")

        content = _first_choice_content(body)
        if content is None:
            logger.warning(
                "completion_malformed_response",
                status_code=response.status_code,
            )
            return CompletionFailure(
                ErrorKind.MALFORMED_RESPONSE,
                "Response has no choices[0].message.content",
            )

        logger.info(
            "completion_succeeded",
            attempts=response.attempts,
            response_chars=len(content),
        )
        return CompletionSuccess(text=content)


def _first_choice_content(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str):
        return None
    return content
