"""
Error normalization - Render every failure as the standard envelope.

Status mapping:
    NotFoundError            404
    PermissionDeniedError    403
    InvalidOperationError    400
    ConflictError            400
    NotSupportedError        501
    RequestValidationError   400  VALIDATION_ERROR
    HTTPException            its own status (NOT_FOUND, METHOD_NOT_ALLOWED, ...)
    anything else            500  INTERNAL_ERROR, logged, no internals leaked
"""

from typing import Any, Optional
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..services.errors import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    NotSupportedError,
    PermissionDeniedError,
    ServiceError,
)
from ..services.models import utc_now_iso
from .schemas import ErrorBody, ErrorCode, ErrorResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-request-id"

SERVICE_ERROR_STATUS: list[tuple[type[ServiceError], int]] = [
    (NotFoundError, 404),
    (PermissionDeniedError, 403),
    (InvalidOperationError, 400),
    (ConflictError, 400),
    (NotSupportedError, 501),
]

HTTP_STATUS_CODES = {
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
}


class APIError(Exception):
    """An error raised by route code with an explicit status and code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details
        self.headers = headers


def request_id_of(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[Any] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Create a standardized error response."""
    request_id = request_id_of(request)
    envelope = ErrorResponse(
        error=ErrorBody(code=code, message=message, details=details),
        timestamp=utc_now_iso(),
        request_id=request_id,
    )
    response = JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(envelope.model_dump(by_alias=True, exclude_none=True)),
        headers=headers,
    )
    if request_id:
        response.headers[REQUEST_ID_HEADER] = request_id
    return response


def status_for(exc: ServiceError) -> int:
    for family, status_code in SERVICE_ERROR_STATUS:
        if isinstance(exc, family):
            return status_code
    return 500


# =============================================================================
# Handlers
# =============================================================================

async def handle_api_error(request: Request, exc: APIError) -> JSONResponse:
    return error_response(request, exc.status_code, exc.code, exc.message, exc.details, exc.headers)


async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code == 500:
        logger.error("Unmapped service error %s: %s", type(exc).__name__, exc.message)
        return error_response(request, 500, ErrorCode.INTERNAL_ERROR.value, "Internal server error")
    return error_response(request, status_code, exc.code, exc.message, exc.details)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "loc": list(error.get("loc", ())),
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return error_response(
        request,
        400,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        {"errors": errors},
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_STATUS_CODES.get(exc.status_code)
    code_value = code.value if code else f"HTTP_{exc.status_code}"
    details = None
    if exc.status_code == 404:
        message = "Route not found" if exc.detail == "Not Found" else str(exc.detail)
        details = {"path": request.url.path}
    else:
        message = str(exc.detail)
    return error_response(request, exc.status_code, code_value, message, details, exc.headers)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s (request %s)",
        request.method, request.url.path, request_id_of(request),
        exc_info=exc,
    )
    return error_response(request, 500, ErrorCode.INTERNAL_ERROR.value, "Internal server error")


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, handle_api_error)
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)
