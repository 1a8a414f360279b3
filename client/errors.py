"""Client-side error taxonomy.

Every failure a client action can hit is one of these.  ``ApiClient`` maps
HTTP status + envelope error code onto them; ``InventoryController`` turns
them into a user-visible message.
"""

from typing import Optional


class InventoryClientError(Exception):
    """Base exception for the inventory client"""

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class ValidationError(InventoryClientError):
    """Input rejected by the local form check or by the server (400)"""
    pass


class ConflictError(ValidationError):
    """Username already taken"""
    pass


class UnauthorizedError(InventoryClientError):
    """Missing, invalid or expired token, or bad credentials. Forces logout."""
    pass


class ForbiddenError(InventoryClientError):
    """Role-gated action attempted by a non-admin"""
    pass


class NotFoundError(InventoryClientError):
    """Product or user does not exist"""
    pass


class ApiTimeoutError(InventoryClientError):
    """Request exceeded the client deadline. Not retried."""
    pass


class ConnectionFailedError(InventoryClientError):
    """Server unreachable"""
    pass


class ServerError(InventoryClientError):
    """Unexpected 5xx or an unreadable response"""
    pass
