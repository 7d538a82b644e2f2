"""
Exception handlers - Map domain errors to HTTP responses.

Every failure is rendered as an ErrorResponse envelope. Internal error
text is only included in the ``error`` field when details are exposed
(non-production environments).
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api.models import ErrorResponse
from src.domain.exceptions import (
    DeliveryFailed,
    EmailAlreadyRegistered,
    InvalidAttachment,
    InvalidInput,
    InvalidTransition,
    RateLimited,
    RegistrationError,
    ResourceNotFound,
    TicketIdGenerationFailed,
    VerificationFailed,
    VerificationRequired,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR: dict[type[RegistrationError], int] = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    EmailAlreadyRegistered: status.HTTP_409_CONFLICT,
    RateLimited: status.HTTP_429_TOO_MANY_REQUESTS,
    VerificationFailed: status.HTTP_400_BAD_REQUEST,
    VerificationRequired: status.HTTP_403_FORBIDDEN,
    InvalidAttachment: status.HTTP_400_BAD_REQUEST,
    ResourceNotFound: status.HTTP_404_NOT_FOUND,
    InvalidTransition: status.HTTP_409_CONFLICT,
    TicketIdGenerationFailed: status.HTTP_503_SERVICE_UNAVAILABLE,
    DeliveryFailed: status.HTTP_502_BAD_GATEWAY,
}

# Messages shown instead of the collaborator's raw error text
PUBLIC_MESSAGES: dict[type[RegistrationError], str] = {
    DeliveryFailed: "Failed to send OTP. Please try again.",
}


def status_for(exc: RegistrationError) -> int:
    """Resolve the HTTP status for a domain error, most specific class first."""
    if isinstance(exc, InvalidAttachment) and exc.too_large:
        return status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_response(
    status_code: int,
    message: str,
    error_code: str,
    detail: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(message=message, error_code=error_code, error=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def register_exception_handlers(app: FastAPI, expose_details: bool = False) -> None:
    """
    Install handlers translating exceptions into ErrorResponse envelopes.

    Args:
        app: Application to configure
        expose_details: Include internal error text in responses
    """

    def detail_of(exc: Exception) -> str | None:
        return str(exc) if expose_details else None

    @app.exception_handler(RegistrationError)
    async def handle_registration_error(request: Request, exc: RegistrationError) -> JSONResponse:
        public_message = next(
            (msg for cls, msg in PUBLIC_MESSAGES.items() if isinstance(exc, cls)), None
        )
        headers = None
        if isinstance(exc, RateLimited) and exc.retry_after_seconds:
            headers = {"Retry-After": str(exc.retry_after_seconds)}
        return error_response(
            status_for(exc),
            public_message or exc.message or "Request failed",
            exc.error_code,
            detail_of(exc) if public_message else None,
            headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = ", ".join(
            ".".join(str(part) for part in error["loc"] if part != "body") for error in exc.errors()
        )
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            f"Invalid or missing fields: {fields}" if fields else "Invalid request",
            InvalidInput.error_code,
            detail_of(exc),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return error_response(
            exc.status_code,
            str(exc.detail),
            "HTTPError",
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            "InternalError",
            detail_of(exc),
        )
