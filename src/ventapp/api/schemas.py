"""Request/response schemas for the HTTP API."""

from pydantic import BaseModel


class ComplainRequest(BaseModel):
    """Body of ``POST /api/complain``.

    ``language`` stays a plain string here so unsupported codes reach the
    route and get a 400 with the usual ``{error}`` body.
    """

    complaint: str
    language: str | None = None


class ComplainResponse(BaseModel):
    response: str


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None
