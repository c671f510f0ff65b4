"""Completion pipeline: prompt routing, resilient transport, retry policy.

Quick start::

    from ventapp.config import get_settings
    from ventapp.i18n import Language
    from ventapp.llm import create_http_client, create_prompt_router

    settings = get_settings()
    async with create_http_client(settings) as client:
        router = create_prompt_router(settings, client)
        result = await router.handle("my boss again...", Language.EN)
"""

from ventapp.llm.prompts import SystemPromptTable, load_prompt_table
from ventapp.llm.retry import RetryPolicy
from ventapp.llm.router import PromptRouter
from ventapp.llm.schemas import (
    CompletionFailure,
    CompletionRequest,
    CompletionResult,
    CompletionSuccess,
    RawResponse,
)
from ventapp.llm.setup import create_http_client, create_prompt_router
from ventapp.llm.transport import ResilientTransport

__all__ = [
    "CompletionFailure",
    "CompletionRequest",
    "CompletionResult",
    "CompletionSuccess",
    "PromptRouter",
    "RawResponse",
    "ResilientTransport",
    "RetryPolicy",
    "SystemPromptTable",
    "create_http_client",
    "create_prompt_router",
    "load_prompt_table",
]
