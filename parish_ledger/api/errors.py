"""API error handling and response helpers."""

import logging
from typing import Any, Dict

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from parish_ledger.errors import AppError
from parish_ledger.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)


def error_response(error: AppError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return ErrorResponse(error=error.message, code=error.code).model_dump()


def _error_json(http_status: int, message: str, code: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=http_status,
        content=ErrorResponse(error=message, code=code).model_dump(),
        headers=headers,
    )


def _validation_message(exc: RequestValidationError) -> str:
    """First schema error as 'field: message'."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(
        str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")
    )
    message = first.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


def register_exception_handlers(app: FastAPI) -> None:
    """Map application and framework errors onto the error envelope."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        logger.warning(
            f"{request.method} {request.url.path} -> {exc.http_status} {exc.code}: {exc.message}"
        )
        return JSONResponse(status_code=exc.http_status, content=error_response(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _validation_message(exc)
        logger.warning(f"{request.method} {request.url.path} -> 400 validation_error: {message}")
        return _error_json(status.HTTP_400_BAD_REQUEST, message, "validation_error")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_json(
            exc.status_code, str(exc.detail), "http_error", headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return _error_json(
            status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "internal_error"
        )


__all__ = ["error_response", "register_exception_handlers"]
