"""
Global exception handlers.

- AppError: its own status and {"detail": {code, message, field?}} envelope
- RequestValidationError: rendered as ValidationError naming the first bad field
- Exception: 500 without internal details (unless DEBUG)
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from prodmatic.core.config import settings
from prodmatic.core.errors import AppError, ValidationError

logger = logging.getLogger(__name__)

# Request locations that are not part of the field name
_LOCATIONS = {"body", "query", "path", "header", "cookie"}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(
            level,
            exc.message,
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = exc.errors()
        logger.info(
            "Request validation failed",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        details = [
            {"field": _field_name(err["loc"]), "message": err["msg"], "type": err["type"]}
            for err in errors
        ]
        first = details[0] if details else {"field": None, "message": "Invalid request"}
        error = ValidationError(first["message"], field=first["field"] or None)
        content = error.to_response()
        content["detail"]["errors"] = details
        return JSONResponse(status_code=error.status_code, content=content)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            exc_info=exc,
            extra={"error_code": "INTERNAL_SERVER_ERROR", "path": request.url.path},
        )
        detail = {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred",
        }
        if settings.DEBUG:
            detail["message"] = str(exc)
            detail["type"] = type(exc).__name__
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": detail},
        )


def _field_name(loc: tuple) -> str:
    parts = [str(part) for part in loc if str(part) not in _LOCATIONS]
    return ".".join(parts)
