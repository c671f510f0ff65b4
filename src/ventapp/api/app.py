"""FastAPI application with lifespan management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Annotated

import structlog
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ventapp.api.deps import get_app_settings
from ventapp.api.middleware import RequestLoggingMiddleware
from ventapp.api.routes.complain import router as complain_router
from ventapp.config import Settings, settings, validate_startup
from ventapp.errors import PromptTableError
from ventapp.llm import create_http_client, create_prompt_router, load_prompt_table
from ventapp.logging_config import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown.

    Startup:
        - Validate required configuration; abort the process if missing.
        - Load the system prompt table.
        - Create the shared outbound HTTP client and PromptRouter.
    Shutdown:
        - Close the outbound HTTP client.
    """
    configure_logging(
        environment=str(settings.environment),
        log_level=settings.log_level,
    )

    check = validate_startup(settings)
    if not check.ok:
        logger.critical("startup_config_invalid", missing=check.missing)
        raise SystemExit(1)

    try:
        prompts = load_prompt_table()
    except PromptTableError as exc:
        logger.critical("startup_prompts_invalid", error=str(exc))
        raise SystemExit(1) from exc

    async with create_http_client(settings) as client:
        app.state.prompt_router = create_prompt_router(settings, client, prompts)
        logger.info(
            "app_started",
            environment=str(settings.environment),
            model=settings.completion_model,
            prompts_version=prompts.version,
        )
        yield

    logger.info("app_stopped")


app = FastAPI(
    title="Let's Vent Together",
    description="Forward complaints to a chat-completion model for a sympathetic reply",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allowed_methods,
    allow_headers=settings.cors_allowed_headers,
)


@app.get("/health")
async def health(
    app_settings: Annotated[Settings, Depends(get_app_settings)],
) -> JSONResponse:
    """Readiness check -- credential configured and prompt table loadable."""
    checks: dict[str, str] = {}
    overall = "ok"

    check = validate_startup(app_settings)
    if check.ok:
        checks["config"] = "ok"
    else:
        checks["config"] = f"error: missing {', '.join(check.missing)}"
        overall = "degraded"

    try:
        load_prompt_table()
        checks["prompts"] = "ok"
    except PromptTableError as e:
        logger.warning("health_check_prompts_error", error=str(e))
        checks["prompts"] = f"error: {type(e).__name__}"
        overall = "degraded"

    status_code = 200 if overall == "ok" else 503
    return JSONResponse(
        status_code=status_code,
        content={
            "status": overall,
            "checks": checks,
            "timestamp": datetime.now(UTC).isoformat(timespec="seconds"),
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed request bodies get the same ``{error}`` shape as other failures."""
    logger.info("request_invalid", path=request.url.path, errors=exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body"},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Catch-all handler for unhandled exceptions."""
    logger.error("unhandled_exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )


app.include_router(complain_router, prefix="/api")
