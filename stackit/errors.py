"""Typed failures raised by services and rendered by the API.

Every error carries a machine-readable ``kind`` and the HTTP status it maps to.
The handler in :mod:`stackit.main` turns them into ``{"error", "detail"}``
JSON bodies.
"""
from __future__ import annotations

from fastapi import Request, status
from fastapi.responses import JSONResponse


class StackItError(Exception):
    kind = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.kind.replace("_", " ").capitalize()


class NotFoundError(StackItError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(StackItError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class UnauthorizedError(StackItError):
    kind = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class ValidationError(StackItError):
    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class SelfVoteError(ValidationError):
    kind = "self_vote"


class InvalidDirectionError(ValidationError):
    kind = "invalid_direction"


class ConflictError(StackItError):
    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


async def stackit_error_handler(request: Request, exc: StackItError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.kind, "detail": exc.message},
        headers=headers,
    )


__all__ = [
    "StackItError",
    "NotFoundError",
    "ForbiddenError",
    "UnauthorizedError",
    "ValidationError",
    "SelfVoteError",
    "InvalidDirectionError",
    "ConflictError",
    "stackit_error_handler",
]
