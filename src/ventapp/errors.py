"""Domain-specific exceptions and the completion failure taxonomy."""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of a failed completion, used to pick a user-facing message."""

    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    API_ERROR = "api_error"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


class UnsupportedLanguageError(ValueError):
    """Raised when a client asks for a language without a system prompt."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Unsupported language: {value!r}")


class PromptTableError(Exception):
    """Raised when the system prompt table is missing or incomplete."""
