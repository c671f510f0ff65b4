"""Complaint endpoint.

Routes
------
- ``POST /api/complain`` — Forward a complaint, return the model's reply

Every failure is converted here into a localized message plus a status
reflecting its category; diagnostic detail only goes to the server log.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ventapp.api.deps import get_app_settings, get_prompt_router
from ventapp.api.schemas import ComplainRequest, ComplainResponse, ErrorResponse
from ventapp.config import Settings
from ventapp.errors import ErrorKind, UnsupportedLanguageError
from ventapp.i18n import (
    UNSUPPORTED_LANGUAGE_MESSAGE,
    error_message,
    resolve_language,
    translate,
)
from ventapp.llm.router import PromptRouter
from ventapp.llm.schemas import CompletionFailure

logger = structlog.get_logger()

router = APIRouter(tags=["complain"])

RouterDep = Annotated[PromptRouter, Depends(get_prompt_router)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.TIMEOUT: 504,
    ErrorKind.NETWORK_ERROR: 503,
    ErrorKind.API_ERROR: 502,
    ErrorKind.MALFORMED_RESPONSE: 500,
    ErrorKind.UNKNOWN: 500,
}


def status_for(kind: ErrorKind) -> int:
    return STATUS_BY_KIND.get(kind, 500)


def _error(status_code: int, message: str, details: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=message, details=details)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
    )


@router.post(
    "/complain",
    response_model=ComplainResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def complain(
    body: ComplainRequest,
    prompt_router: RouterDep,
    settings: SettingsDep,
) -> ComplainResponse | JSONResponse:
    """Forward a complaint to the completion API and return its reply."""
    try:
        language = resolve_language(body.language)
    except UnsupportedLanguageError as exc:
        logger.info("complaint_rejected", reason="unsupported_language", value=exc.value)
        return _error(400, UNSUPPORTED_LANGUAGE_MESSAGE)

    if not body.complaint.strip():
        logger.info("complaint_rejected", reason="empty_complaint")
        return _error(400, translate(language, "empty_complaint"))

    result = await prompt_router.handle(body.complaint, language)

    if isinstance(result, CompletionFailure):
        details = result.message if settings.is_dev else None
        return _error(status_for(result.kind), error_message(language, result.kind), details)

    return ComplainResponse(response=result.text)
