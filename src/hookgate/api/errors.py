"""Structured API error handling.

This module provides:
- ErrorCode enum with domain-grouped error codes for the admin API
- APIError exception class for structured admin error responses
- error_response / forwarding_error_handler for the forwarding surface
- Global exception handlers for consistent error formatting

Admin response format:
    {
        "detail": {
            "code": "ROUTE_NOT_FOUND",
            "message": "Route 'orders' not found",
            "details": {"key": "orders"}
        }
    }

Forwarding response format (what webhook senders see):
    {"error": "unknown_key", "detail": "No route registered for key 'orders'"}
"""

from __future__ import annotations

__all__ = [
    "APIError",
    "ErrorCode",
    "api_error_handler",
    "error_response",
    "forwarding_error_handler",
    "http_exception_handler",
    "validation_error_handler",
]

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hookgate.exceptions import ForwardingError


class ErrorCode(str, Enum):
    """API error codes for programmatic handling.

    Codes are namespaced by domain:
    - AUTH_*: Admin authentication errors
    - ROUTE_*: Route management errors
    - VALIDATION_*: Input validation errors
    - INTERNAL_*: Internal server errors
    """

    # Authentication errors (401)
    AUTH_REQUIRED = "AUTH_REQUIRED"

    # Route errors (400, 404, 500)
    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    ROUTE_INVALID = "ROUTE_INVALID"
    ROUTE_NOT_ALLOWED = "ROUTE_NOT_ALLOWED"
    ROUTE_SAVE_FAILED = "ROUTE_SAVE_FAILED"

    # Generic errors for unmapped exceptions
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Internal errors (500, 502, 503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


class APIError(HTTPException):
    """Structured API error with error code.

    Attributes:
        status_code: HTTP status code.
        code: Error code from ErrorCode enum.
        error_message: Human-readable error message.
        error_details: Optional contextual details.
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.error_message = message
        self.error_details = details

        detail: dict[str, Any] = {
            "code": code.value,
            "message": message,
        }
        if details:
            detail["details"] = details

        super().__init__(status_code=status_code, detail=detail)


def error_response(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    """Build a forwarding-surface error response.

    Args:
        status_code: HTTP status code.
        error: Machine-readable error code (e.g. "bad_gateway").
        detail: Optional human-readable detail.
    """
    content: dict[str, Any] = {"error": error}
    if detail:
        content["detail"] = detail
    return JSONResponse(status_code=status_code, content=content)


async def forwarding_error_handler(request: Request, exc: ForwardingError) -> JSONResponse:
    """Turn any ForwardingError into its JSON error body."""
    return error_response(exc.status_code, exc.code, exc.detail)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions with structured response."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle Pydantic validation errors with structured response.

    Keeps field-level errors under "validation_errors" and summarizes them
    in "message".
    """
    errors = exc.errors()

    if len(errors) == 1:
        first = errors[0]
        field_name = ".".join(str(part) for part in first.get("loc", []) if part != "body")
        msg = first.get("msg", "Validation error")
        message = f"{field_name}: {msg}" if field_name else msg
    else:
        message = f"{len(errors)} validation errors"

    detail: dict[str, Any] = {
        "code": ErrorCode.VALIDATION_ERROR.value,
        "message": message,
        "validation_errors": [
            {
                "loc": list(e.get("loc", [])),
                "msg": e.get("msg", ""),
                "type": e.get("type", ""),
            }
            for e in errors
        ],
    }

    return JSONResponse(status_code=422, content={"detail": detail})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle plain HTTPException by wrapping its detail in the structured format.

    Already-structured details (from APIError) pass through unchanged.
    """
    if isinstance(exc.detail, dict) and "code" in exc.detail:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=exc.headers,
        )

    code = _status_to_error_code(exc.status_code)
    message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": {"code": code.value, "message": message}},
        headers=exc.headers,
    )


def _status_to_error_code(status_code: int) -> ErrorCode:
    mapping = {
        400: ErrorCode.VALIDATION_ERROR,
        401: ErrorCode.AUTH_REQUIRED,
        404: ErrorCode.NOT_FOUND,
        405: ErrorCode.METHOD_NOT_ALLOWED,
        500: ErrorCode.INTERNAL_ERROR,
        502: ErrorCode.UPSTREAM_ERROR,
        503: ErrorCode.SERVICE_UNAVAILABLE,
    }
    return mapping.get(status_code, ErrorCode.INTERNAL_ERROR)
