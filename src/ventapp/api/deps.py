"""FastAPI dependency injection."""

from typing import cast

from fastapi import Request

from ventapp.config import Settings, get_settings
from ventapp.llm.router import PromptRouter

__all__ = ["get_app_settings", "get_prompt_router"]


async def get_prompt_router(request: Request) -> PromptRouter:
    """Retrieve PromptRouter from app state.

    Initialized during lifespan startup.
    """
    return cast(PromptRouter, request.app.state.prompt_router)


def get_app_settings() -> Settings:
    """Settings as a dependency, overridable in tests."""
    return get_settings()
