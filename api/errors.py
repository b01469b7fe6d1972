"""Global exception handlers for FastAPI."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from auth.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    PermissionDeniedError,
    RateLimitedError,
    UserInactiveError,
)
from clients.email_client import EmailError
from clients.msg91_client import Msg91Error

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error(request: Request, status_code: int, code: str, message: str, headers: dict | None = None):
    return JSONResponse(
        status_code=status_code,
        headers=headers,
        content=error_response(code, message, _request_id(request)).model_dump(mode="json"),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the app."""

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        message = str(exc)
        if "not found" in message.lower():
            return _error(request, 404, ErrorCodes.NOT_FOUND, message)
        code = getattr(exc, "code", None) or ErrorCodes.INVALID_REQUEST
        return _error(request, 400, code, message)

    @app.exception_handler(ValidationError)
    async def model_validation_handler(request: Request, exc: ValidationError):
        """Stored data that fails model validation is a server fault, not a bad request."""
        logger.exception(f"Model validation failed on {request.url.path}")
        return _error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")

    @app.exception_handler(InvalidCredentialsError)
    async def invalid_credentials_handler(request: Request, exc: InvalidCredentialsError):
        return _error(request, 401, ErrorCodes.INVALID_CREDENTIALS, "Invalid email or password")

    @app.exception_handler(InvalidTokenError)
    async def invalid_token_handler(request: Request, exc: InvalidTokenError):
        return _error(request, 401, ErrorCodes.INVALID_TOKEN, "Invalid or expired token")

    @app.exception_handler(UserInactiveError)
    async def inactive_handler(request: Request, exc: UserInactiveError):
        return _error(request, 403, ErrorCodes.ACCOUNT_DISABLED, str(exc) or "Account disabled")

    @app.exception_handler(PermissionDeniedError)
    async def permission_handler(request: Request, exc: PermissionDeniedError):
        return _error(request, 403, ErrorCodes.FORBIDDEN, str(exc) or "Forbidden")

    @app.exception_handler(RateLimitedError)
    async def rate_limited_handler(request: Request, exc: RateLimitedError):
        return _error(
            request,
            429,
            ErrorCodes.RATE_LIMITED,
            f"Too many requests. Please wait {exc.retry_after_seconds} seconds.",
            headers={"Retry-After": str(exc.retry_after_seconds)},
        )

    @app.exception_handler(Msg91Error)
    @app.exception_handler(EmailError)
    async def notification_error_handler(request: Request, exc: Exception):
        logger.error(f"Notification delivery failed on {request.url.path}: {exc}")
        return _error(request, 500, ErrorCodes.NOTIFICATION_FAILED, f"Failed to send message: {exc}")

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error(request, 422, ErrorCodes.VALIDATION_ERROR, str(exc.errors()))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception")
        return _error(request, 500, ErrorCodes.INTERNAL_ERROR, "An internal error occurred")
