"""Centralized application configuration via environment variables."""

from dataclasses import dataclass, field
from enum import StrEnum
from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    The completion API key uses SecretStr to prevent accidental logging.
    It is optional at construction time so that client-side commands can
    load settings; serving requires it (see validate_startup).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App ---
    environment: Environment = Environment.DEVELOPMENT
    log_level: str = "DEBUG"
    # --- CORS ---
    cors_allowed_origins: list[str] = []
    cors_allow_credentials: bool = False
    cors_allowed_methods: list[str] = ["GET", "POST"]
    cors_allowed_headers: list[str] = ["Content-Type"]

    # --- Completion API (OpenRouter, OpenAI-compatible) ---
    openrouter_api_key: SecretStr | None = None
    completion_base_url: str = "https://openrouter.ai/api/v1"
    completion_model: str = "deepseek/deepseek-chat"
    # Sent as HTTP-Referer / X-Title identification headers.
    site_url: str = "https://ventapp.vercel.app"
    app_title: str = "一起吐槽吧"

    # --- Transport ---
    max_attempts: int = 3
    attempt_timeout_ms: int = 8000
    backoff_base_ms: int = 1000

    # --- Client ---
    api_url: str = "http://127.0.0.1:8000"
    state_path: Path = Path.home() / ".ventapp" / "state.json"

    @property
    def completion_endpoint(self) -> str:
        return f"{self.completion_base_url.rstrip('/')}/chat/completions"

    # --- Convenience properties ---
    @property
    def is_dev(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    @property
    def is_prod(self) -> bool:
        return self.environment == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        return self.environment == Environment.TESTING


@dataclass(frozen=True)
class StartupCheck:
    """Outcome of validating configuration required to serve requests."""

    missing: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.missing


def validate_startup(settings: Settings) -> StartupCheck:
    """Check that every variable the API server needs is present.

    Returns a result instead of raising; callers decide how to abort.
    """
    missing: list[str] = []
    key = settings.openrouter_api_key
    if key is None or not key.get_secret_value().strip():
        missing.append("OPENROUTER_API_KEY")
    return StartupCheck(missing=missing)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton.

    Usage::

        from ventapp.config import get_settings
        settings = get_settings()
    """
    return Settings()


settings = get_settings()
