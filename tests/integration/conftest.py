"""Shared fixtures for integration tests against the live completion API."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import pytest

from ventapp.config import Settings, get_settings, validate_startup
from ventapp.llm import PromptRouter, create_http_client, create_prompt_router


@pytest.fixture()
def live_settings() -> Settings:
    """Settings from the real environment; skips when the key is absent."""
    settings = get_settings()
    if not validate_startup(settings).ok:
        pytest.skip("OPENROUTER_API_KEY not set")
    return settings


@pytest.fixture()
async def live_router(live_settings: Settings) -> AsyncGenerator[PromptRouter]:
    async with create_http_client(live_settings) as client:
        yield create_prompt_router(live_settings, client)
