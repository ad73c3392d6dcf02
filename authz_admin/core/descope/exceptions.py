"""Descope-specific exceptions for error handling."""
from __future__ import annotations

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class DescopeError(Exception):
    """Base exception for all Descope operations."""
    pass


class DescopeAPIError(DescopeError):
    """HTTP or transport error from the Descope management API.

    Attributes:
        status_code: HTTP status code (0 when the request never completed)
        message: Error message from response
        endpoint: API endpoint that failed
        error_code: Descope error code (e.g. "E112102"), when the body carries one
    """

    def __init__(self, status_code: int, message: str, endpoint: str, error_code: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        self.endpoint = endpoint
        self.error_code = error_code
        super().__init__(f"[{status_code}] {endpoint}: {message}")

    @property
    def is_not_found(self) -> bool:
        """True when the backend reports the requested entity as absent."""
        return self.status_code == 404 or "not found" in (self.message or "").lower()


class DescopeResponseError(DescopeError):
    """The backend answered, but its payload could not be decoded."""

    def __init__(self, message: str, endpoint: str):
        self.message = message
        self.endpoint = endpoint
        super().__init__(f"{endpoint}: unreadable response: {message}")


class DescopeOperationError(DescopeError):
    """An operation could not be carried out against the backend.

    The message always reads "Failed to <operation>: <cause>".
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Failed to {operation}: {cause}")


def wrap_exception(operation: str, cause: Exception) -> DescopeOperationError:
    """Log a backend failure and wrap it with an operation-description prefix.

    Callers raise the returned exception ``from`` the original cause.
    """
    logger.error("Failed to %s: %s", operation, cause)
    return DescopeOperationError(operation, cause)
