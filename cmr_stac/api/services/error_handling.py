"""Error responses for the HTTP boundary.

Exceptions raised anywhere below the endpoints are rendered here, and only
here, into the error envelope:

    {"type": "error", "error": {"type": "<error_type>", "message": "..."}}
"""

import logging
import traceback
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from cmr_stac.core.error_types import ErrorType
from cmr_stac.core.exceptions import CmrError, CmrStacError, ValidationFailure

logger = logging.getLogger(__name__)


def _envelope(
    status_code: int, error_type: ErrorType, message: str, details: Any | None = None
) -> JSONResponse:
    error: dict[str, Any] = {"type": error_type.value, "message": message}
    if details is not None:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"type": "error", "error": error})


@dataclass(frozen=True, slots=True)
class ErrorResponseBuilder:
    """Centralized builder for consistent error responses across all endpoints."""

    @staticmethod
    def not_found(message: str) -> JSONResponse:
        """Build a 404 Not Found error response."""
        return _envelope(404, ErrorType.NOT_FOUND, message)

    @staticmethod
    def invalid_parameter(message: str, details: Any | None = None) -> JSONResponse:
        """Build a 400 Bad Request error response."""
        return _envelope(400, ErrorType.BAD_REQUEST, message, details)

    @staticmethod
    def client_error(status_code: int, message: str) -> JSONResponse:
        """Build a 4xx response for routing failures such as 405."""
        return _envelope(status_code, ErrorType.BAD_REQUEST, message)

    @staticmethod
    def upstream_error(exception: Exception, context: str | None = None) -> JSONResponse:
        """Build a 502 Bad Gateway or 504 Gateway Timeout error response.

        Args:
            exception: The upstream exception
            context: Optional context about what operation failed

        Returns:
            JSONResponse with 504 for timeouts and 502 otherwise
        """
        if isinstance(exception, httpx.TimeoutException):
            message = "CMR request timed out"
            if context:
                message += f" while {context}"
            message += ". Consider increasing REQUEST_TIMEOUT."
            return _envelope(504, ErrorType.UPSTREAM_TIMEOUT, message)

        if isinstance(exception, CmrError):
            return _envelope(
                502, ErrorType.UPSTREAM_HTTP_ERROR, exception.message, exception.errors or None
            )

        message = "CMR service error"
        if context:
            message += f" while {context}"
        return _envelope(502, ErrorType.UPSTREAM_ERROR, message, str(exception))

    @staticmethod
    def internal_error(
        message: str,
        error_type: ErrorType = ErrorType.UNEXPECTED_ERROR,
        details: Any | None = None,
    ) -> JSONResponse:
        """Build a 500 Internal Server Error response."""
        return _envelope(500, error_type, message, details)

    @staticmethod
    def from_exception(exception: CmrStacError) -> JSONResponse:
        """Render any package exception using its own status code and type."""
        if isinstance(exception, CmrError):
            return ErrorResponseBuilder.upstream_error(exception)
        if isinstance(exception, ValidationFailure):
            return ErrorResponseBuilder.internal_error(
                exception.message, exception.error_type, exception.errors
            )
        return _envelope(exception.status_code, exception.error_type, exception.message)


def _request_label(request: Request) -> str:
    return f"{request.method} {request.url.path}"


async def handle_cmr_stac_error(request: Request, exc: CmrStacError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{_request_label(request)} failed: {exc.message}")
    else:
        logger.info(f"{_request_label(request)} -> {exc.status_code}: {exc.message}")
    return ErrorResponseBuilder.from_exception(exc)


async def handle_http_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{_request_label(request)} failed talking to CMR: {exc!r}")
    return ErrorResponseBuilder.upstream_error(exc, "querying CMR")


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"loc": list(error.get("loc", [])), "msg": error.get("msg")} for error in exc.errors()
    ]
    return ErrorResponseBuilder.invalid_parameter("Request could not be parsed", details)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"{_request_label(request)} raised an unexpected error: {exc}")
    logger.error(traceback.format_exc())
    return ErrorResponseBuilder.internal_error("An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the error envelope handlers to ``app``."""
    app.add_exception_handler(CmrStacError, handle_cmr_stac_error)
    app.add_exception_handler(httpx.HTTPError, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
