from typing import Any

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from notemaker.errors import (
    AccessDeniedError,
    AuthenticationError,
    DuplicateEmailError,
    NotFoundError,
    OTPError,
    UpstreamProviderError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

# First match wins, so subclasses must precede their bases
_STATUS_CODES: list[tuple[type[Exception], int]] = [
    (AuthenticationError, 401),
    (AccessDeniedError, 403),
    (NotFoundError, 404),
    (ValidationError, 400),
    (DuplicateEmailError, 400),
    (OTPError, 400),
    (UpstreamProviderError, 400),
]


def create_json_error_response(
    status_code: int, message: str, errors: list[dict[str, Any]] | None = None
) -> JSONResponse:
    """Create the ``{success: false, message, errors?}`` envelope."""
    content: dict[str, Any] = {"success": False, "message": message}
    if errors:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


def status_code_for(exc: Exception) -> int:
    for error_class, status_code in _STATUS_CODES:
        if isinstance(exc, error_class):
            return status_code
    # Default for any other UserError subclass
    return 400


async def user_error_handler(_: Request, exc: Exception) -> Response:
    """Handle all UserError subclasses with appropriate status codes."""
    errors = exc.errors if isinstance(exc, ValidationError) else None
    return create_json_error_response(status_code=status_code_for(exc), message=str(exc), errors=errors)


async def request_validation_handler(_: Request, exc: Exception) -> Response:
    """Render request-shape failures as 400 with one entry per offending field."""
    details = exc.errors() if isinstance(exc, RequestValidationError) else []
    errors = []
    for detail in details:
        loc = [str(part) for part in detail.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(detail.get("msg", "Invalid value")).removeprefix("Value error, ")
        errors.append({"field": ".".join(loc), "message": message})
    return create_json_error_response(status_code=400, message="Validation failed", errors=errors)


async def http_exception_handler(_: Request, exc: Exception) -> Response:
    """Wrap routing errors (404, 405) in the standard envelope."""
    if isinstance(exc, StarletteHTTPException):
        message = "Route not found" if exc.status_code == 404 else str(exc.detail)
        return create_json_error_response(status_code=exc.status_code, message=message)
    return await general_exception_handler(_, exc)


async def general_exception_handler(_: Request, exc: Exception) -> Response:
    """Handle unexpected errors (500)."""
    logger.exception("unexpected_error", error_type=type(exc).__name__)
    return create_json_error_response(status_code=500, message="Internal server error")
