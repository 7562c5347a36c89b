"""
Error taxonomy and the error envelope shared by every failure response.

Every error body has the shape::

    {"errors": [{"type": ..., "msg": ..., "path": ..., "location": ...}]}
"""
from typing import Any, Dict, List, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors that carry their own HTTP status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    # Message sent to the client when the real one must stay server-side
    public_message: Optional[str] = None

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def client_message(self) -> str:
        return self.public_message or self.message


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(AppError):
    """A unique value (the email) is already taken."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class PersistenceError(AppError):
    """The database could not complete an operation."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal server error"


class TokenError(AppError):
    """A token could not be signed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message = "Internal server error"


def error_item(type_: str, msg: str, path: str = "", location: str = "") -> Dict[str, str]:
    return {"type": type_, "msg": msg, "path": path, "location": location}


def error_envelope(items: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    return {"errors": items}
