"""
Response envelope shared by every JSON endpoint, plus the error codes that
travel inside it.

Success::

    {"success": true,  "message": "...", "data": {...}, "error": null}

Failure::

    {"success": false, "message": "Product not found", "data": null, "error": "not_found"}

The client decodes the same model (``client.api``), so the two sides never
need to guess at a response's shape.
"""

from typing import Generic, Optional, TypeVar

from fastapi import HTTPException, status
from pydantic import BaseModel

T = TypeVar("T")


# -- Error codes -------------------------------------------------------------

VALIDATION_ERROR = "validation_error"
CONFLICT = "conflict"
UNAUTHORIZED = "unauthorized"
INVALID_TOKEN = "invalid_token"
FORBIDDEN = "forbidden"
NOT_FOUND = "not_found"
SERVER_ERROR = "server_error"

# Fallback code when an HTTPException was raised without one (e.g. by Starlette)
_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: VALIDATION_ERROR,
    status.HTTP_401_UNAUTHORIZED: UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: FORBIDDEN,
    status.HTTP_404_NOT_FOUND: NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: VALIDATION_ERROR,
    status.HTTP_409_CONFLICT: CONFLICT,
}


def code_for_status(status_code: int) -> str:
    return _STATUS_CODES.get(status_code, SERVER_ERROR if status_code >= 500 else VALIDATION_ERROR)


# -- Envelope ----------------------------------------------------------------


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None


def ok(data=None, message: Optional[str] = None) -> dict:
    """Build a success envelope body."""
    return {"success": True, "message": message, "data": data, "error": None}


def fail(code: str, message: str) -> dict:
    """Build a failure envelope body."""
    return {"success": False, "message": message, "data": None, "error": code}


# -- Exceptions --------------------------------------------------------------


class ApiError(HTTPException):
    """
    ``HTTPException`` that also carries an envelope error code.

    Raise it from handlers and dependencies exactly like ``HTTPException``;
    the handler registered in ``main`` renders it as a failure envelope.
    """

    def __init__(self, status_code: int, detail: str, code: Optional[str] = None, headers=None):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code or code_for_status(status_code)
