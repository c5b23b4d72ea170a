"""API response envelope helpers and exception handlers.

All API responses use a consistent envelope:
- Success: { "status": 200, "data": ..., "message": "..." }
- Error: { "status": 404, "message": "...", "code": "E_...", "request_id": "..." }

The request_id is included in error responses for debugging and support.
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from vidshare.errors import ERROR_CODE_TO_STATUS, ApiError, ApiErrorCode
from vidshare.logging import get_logger, get_request_id

logger = get_logger(__name__)


def success_response(data: Any, message: str = "Success", status: int = 200) -> dict[str, Any]:
    """Create a success response envelope.

    Args:
        data: The response data to wrap.
        message: Human-readable summary of the outcome.
        status: HTTP status echoed in the body (must match the route status).

    Returns:
        Dict with "status", "data" and "message" keys.
    """
    return {"status": status, "data": data, "message": message}


def error_response(
    code: ApiErrorCode,
    message: str,
    status: int | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Create an error response envelope.

    Args:
        code: The error code enum value.
        message: Human-readable error message.
        status: HTTP status (derived from code if None).
        request_id: Optional request ID for correlation (auto-populated from context if None).

    Returns:
        Dict with status, message, code and (when known) request_id.
    """
    if status is None:
        status = ERROR_CODE_TO_STATUS.get(code, 500)
    if request_id is None:
        request_id = get_request_id()

    body: dict[str, Any] = {"status": status, "message": message, "code": code.value}
    if request_id:
        body["request_id"] = request_id

    return body


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Handle ApiError exceptions and return proper JSON response."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.code, exc.message, exc.status_code),
    )


async def http_exception_handler(request: Request, exc: Any) -> JSONResponse:
    """Handle Starlette/FastAPI HTTPException and return proper JSON response."""
    status_to_code = {
        400: ApiErrorCode.E_INVALID_REQUEST,
        401: ApiErrorCode.E_UNAUTHENTICATED,
        403: ApiErrorCode.E_FORBIDDEN,
        404: ApiErrorCode.E_NOT_FOUND,
        405: ApiErrorCode.E_INVALID_REQUEST,
        422: ApiErrorCode.E_INVALID_REQUEST,
    }
    code = status_to_code.get(exc.status_code, ApiErrorCode.E_INTERNAL)
    message = str(exc.detail) if exc.detail else "An error occurred"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(code, message, exc.status_code),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions and return 500 with E_INTERNAL.

    Logs the exception server-side but never leaks details to client.
    """
    logger.exception("unhandled_exception", error_type=type(exc).__name__)

    return JSONResponse(
        status_code=500,
        content=error_response(ApiErrorCode.E_INTERNAL, "Internal server error", 500),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed ids, missing fields and unparseable JSON bodies are all 400s."""
    first = exc.errors()[0] if exc.errors() else {}
    logger.info(
        "request_validation_failed",
        error_type=first.get("type"),
        location=".".join(str(part) for part in first.get("loc", ())),
    )
    return JSONResponse(
        status_code=400,
        content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Invalid request", 400),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
