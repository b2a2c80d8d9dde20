"""Custom exception handlers for consistent error responses.

Every error leaves the API as an ErrorResponse body:

    {"code": "BUS405", "message": "...", "details": ["...", "..."]}

4xx outcomes are logged at WARNING, 5xx at ERROR.
"""

import logging
import traceback
from typing import Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

from depotlifecycle.services.validation import violations_from_errors

logger = logging.getLogger(__name__)

# Default error code per HTTP status for errors raised as HTTPException
STATUS_CODES = {
    400: "VAL400",
    401: "AUT401",
    403: "AUT403",
    404: "NFD404",
    405: "BUS405",
    413: "VAL413",
    501: "NIM501",
    503: "DBU503",
}


class DepotLifecycleError(Exception):
    """Base exception for depot lifecycle errors."""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str = "INT500",
        details: list[str] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class BusinessRuleError(DepotLifecycleError):
    """The request is well formed but breaks a business rule (e.g. unit already gated in)."""

    def __init__(
        self,
        message: str,
        error_code: str = "BUS405",
        details: list[str] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            error_code=error_code,
            details=details,
        )


class InvalidRequestError(DepotLifecycleError):
    """The request is malformed or references something unknown."""

    def __init__(self, message: str, details: list[str] | None = None):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code="VAL400",
            details=details,
        )


class ResourceNotFoundError(DepotLifecycleError):
    """Exception for resources not found."""

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="NFD404",
        )


class FeatureNotImplementedError(DepotLifecycleError):
    """An optional feature this deployment does not offer."""

    def __init__(self, feature: str):
        super().__init__(
            message=f"Feature not implemented: {feature}",
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            error_code="NIM501",
        )


def create_error_response(
    status_code: int,
    message: str,
    error_code: str,
    details: list[str] | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    """Create an ErrorResponse body; `details` is left out when empty."""
    content = {"code": error_code, "message": message}
    if details:
        content["details"] = details

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _log(request: Request, status_code: int, message: str, **extra) -> None:
    level = logging.ERROR if status_code >= 500 else logging.WARNING
    logger.log(
        level,
        message,
        extra={"path": request.url.path, "method": request.method, **extra},
    )


async def depot_lifecycle_exception_handler(
    request: Request,
    exc: DepotLifecycleError,
) -> JSONResponse:
    """Handle the application's own exceptions."""
    _log(
        request,
        exc.status_code,
        f"{exc.error_code} - {exc.message}",
        error_code=exc.error_code,
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details,
    )


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Handle FastAPI / Starlette HTTP exceptions (auth failures, unknown routes)."""
    _log(request, exc.status_code, f"HTTP {exc.status_code}: {exc.detail}")

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=STATUS_CODES.get(exc.status_code, f"ERR{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    """Report every schema violation as a 400 with one detail line each."""
    violations = violations_from_errors(exc.errors(), strip_prefix=("body",))
    _log(
        request,
        status.HTTP_400_BAD_REQUEST,
        f"Validation error on {request.url.path}",
        violations=len(violations),
    )

    return create_error_response(
        status_code=status.HTTP_400_BAD_REQUEST,
        message="Request validation failed",
        error_code="VAL400",
        details=[str(v) for v in violations],
    )


async def database_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    """Handle database integrity errors (unique violations, foreign key, etc.)."""
    error_msg = str(exc.orig) if hasattr(exc, "orig") else str(exc)
    _log(
        request,
        status.HTTP_405_METHOD_NOT_ALLOWED,
        f"Database integrity error on {request.url.path}: {error_msg}",
    )

    if "unique" in error_msg.lower():
        message = "A record with this value already exists"
    elif "foreign key" in error_msg.lower():
        message = "Referenced record does not exist"
    elif "not null" in error_msg.lower():
        message = "Required field is missing"
    else:
        message = "Database constraint violation"

    return create_error_response(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        message=message,
        error_code="BUS405",
    )


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    """Handle database operational errors (connection issues, etc.)."""
    _log(
        request,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        f"Database operational error on {request.url.path}: {exc}",
    )

    return create_error_response(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        message="Database temporarily unavailable. Please try again.",
        error_code="DBU503",
    )


async def general_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Handle all other unhandled exceptions."""
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "traceback": traceback.format_exc(),
        },
        exc_info=True,
    )

    # Internal details stay in the log
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code="INT500",
    )


def register_exception_handlers(app):
    """Register all custom exception handlers with FastAPI app."""
    app.add_exception_handler(DepotLifecycleError, depot_lifecycle_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
