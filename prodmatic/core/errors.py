"""
Error hierarchy.

Every failure the API reports is an AppError subclass carrying a machine
readable code, a human message and the HTTP status it maps to. Handlers in
error_handlers.py render them as {"detail": {"code", "message", "field"?}}.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class AppError(Exception):
    """Base class for all ProdMatic errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        *,
        field: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code
        self.field = field

    def to_response(self) -> dict[str, Any]:
        detail: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.field is not None:
            detail["field"] = self.field
        return {"detail": detail}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} code={self.code!r} message={self.message!r}>"


class ValidationError(AppError):
    """Input failed shape validation or a domain rule."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "VALIDATION_ERROR"


class AuthenticationError(AppError):
    """Missing, invalid or revoked credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_TOKEN"


class UnauthorizedError(AppError):
    """Principal is not a member of the organization or its role is too low."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "INSUFFICIENT_ROLE"


class NotFoundError(AppError):
    """Entity does not exist, is soft-deleted, or belongs to another tenant."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "CONFLICT"


class StorageError(AppError):
    """The relational store rejected or failed an operation."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "STORAGE_ERROR"


def not_found(label: str) -> NotFoundError:
    """Build the standard NotFoundError for an entity label such as 'key_result'."""
    return NotFoundError(
        f"{label.replace('_', ' ').capitalize()} not found",
        code=f"{label.upper()}_NOT_FOUND",
    )
