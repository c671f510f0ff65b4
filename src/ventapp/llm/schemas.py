"""Shared schemas for the completion pipeline."""

from dataclasses import dataclass
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator

from ventapp.errors import ErrorKind
from ventapp.i18n import Language


class CompletionRequest(BaseModel):
    """One user submission. Discarded after the round trip."""

    model_config = ConfigDict(frozen=True)

    complaint_text: str
    language: Language = Language.ZH

    @field_validator("complaint_text")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("complaint_text must not be blank")
        return value


class ChatMessage(BaseModel):
    """Role-tagged message in an OpenAI-compatible chat request."""

    role: Literal["system", "user", "assistant"]
    content: str


class ChatCompletionBody(BaseModel):
    """Outbound request body for the chat-completion endpoint."""

    model: str
    messages: list[ChatMessage]


@dataclass(frozen=True)
class RawResponse:
    """HTTP response from the completion endpoint.

    Attributes:
        status_code: HTTP status of the final attempt.
        body: Decoded JSON body.
        attempts: Number of attempts made, including the final one.
    """

    status_code: int
    body: Any
    attempts: int = 1


@dataclass(frozen=True)
class CompletionSuccess:
    text: str


@dataclass(frozen=True)
class CompletionFailure:
    kind: ErrorKind
    message: str


CompletionResult = CompletionSuccess | CompletionFailure
