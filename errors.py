"""
Application error hierarchy and FastAPI exception handlers.

AppError is the base for all typed errors. The global exception handler
converts AppError subclasses to consistent JSON responses carrying
``success: false`` so clients can branch on a single key.

Verification outcomes (expired, invalid code, lockout) are expected,
user-facing conditions and carry the structured data the UI needs in
``details``. Non-AppError exceptions bubble up as 500s (with Sentry
reporting in production) and never leak internals.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from shared.logging import get_logger

log = get_logger(__name__)


class AppError(Exception):
    """Base application error. All typed errors inherit from this."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        payload: dict = {
            "success": False,
            "error": self.message,
            "code": self.error_code,
        }
        if self.details is not None:
            payload["details"] = self.details
        return payload


class NotFoundError(AppError):
    status_code = 404
    error_code = "not_found"


class CodeExpiredError(AppError):
    status_code = 400
    error_code = "code_expired"


class InvalidCodeError(AppError):
    status_code = 400
    error_code = "invalid_code"


class TooManyAttemptsError(AppError):
    status_code = 400
    error_code = "too_many_attempts"


class RateLimitError(AppError):
    status_code = 429
    error_code = "rate_limit_exceeded"


class ServiceUnavailableError(AppError):
    """A collaborator (database, mail relay) could not be reached."""

    status_code = 503
    error_code = "service_unavailable"


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        # Sentry integration: if sentry_sdk is initialized it will auto-capture
        # unhandled exceptions before this handler fires.
        log.error(
            "unhandled_exception",
            path=request.url.path,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "An internal server error occurred.",
                "code": "internal_error",
            },
        )
