"""Factory wiring settings into a ready PromptRouter."""

import httpx

from ventapp.config import Settings
from ventapp.llm.prompts import SystemPromptTable, load_prompt_table
from ventapp.llm.retry import RetryPolicy
from ventapp.llm.router import PromptRouter
from ventapp.llm.transport import ResilientTransport


def retry_policy_from_settings(settings: Settings) -> RetryPolicy:
    return RetryPolicy.from_millis(
        max_attempts=settings.max_attempts,
        attempt_timeout_ms=settings.attempt_timeout_ms,
        backoff_base_ms=settings.backoff_base_ms,
    )


def create_http_client(settings: Settings) -> httpx.AsyncClient:
    """Shared outbound client; the per-attempt deadline is enforced by the transport."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.attempt_timeout_ms / 1000),
    )


def create_prompt_router(
    settings: Settings,
    client: httpx.AsyncClient,
    prompts: SystemPromptTable | None = None,
) -> PromptRouter:
    """Build a PromptRouter from settings.

    Call validate_startup() first; a missing API key raises ValueError here.
    """
    if settings.openrouter_api_key is None:
        raise ValueError("OPENROUTER_API_KEY is not configured")

    transport = ResilientTransport(client, retry_policy_from_settings(settings))
    return PromptRouter(
        transport,
        prompts or load_prompt_table(),
        endpoint=settings.completion_endpoint,
        api_key=settings.openrouter_api_key.get_secret_value(),
        model=settings.completion_model,
        site_url=settings.site_url,
        app_title=settings.app_title,
    )
