"""
Base exception classes for the service layer.

This module provides a standardized exception hierarchy that enables:
- Consistent error responses across the application
- Machine-readable error codes for client handling

It imports nothing from Django or DRF so it can be re-exported from
core/__init__.py while the app registry is still loading. Rendering lives
in core.handlers.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── PermissionDeniedError - Authorization failures (403)
    └── NotFoundError - Resource not found (404)

Usage:
    from core.exceptions import NotFoundError

    conversation = Conversation.objects.filter(pk=pk).first()
    if conversation is None:
        raise NotFoundError("Conversation not found", error_code="CONVERSATION_NOT_FOUND")

    # core.handlers.api_exception_handler renders it as:
    # 404 {"error": "Conversation not found", "error_code": "CONVERSATION_NOT_FOUND"}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, metadata, etc.)
        status_code: HTTP status used by api_exception_handler
    """

    default_error_code: str = "APPLICATION_ERROR"
    status_code: int = 400

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Conversation not found",
                "error_code": "CONVERSATION_NOT_FOUND",
                "details": {"conversation_id": 123}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )




class PermissionDeniedError(BaseApplicationError):
    """
    Raised when a user lacks permission for an operation.

    Use for authorization failures such as reading a conversation the
    caller does not participate in. For missing or invalid tokens DRF's
    NotAuthenticated/AuthenticationFailed are raised by the auth class.
    """

    default_error_code: str = "PERMISSION_DENIED"
    status_code: int = 403


class NotFoundError(BaseApplicationError):
    """Raised when a single-resource lookup finds nothing."""

    default_error_code: str = "NOT_FOUND"
    status_code: int = 404
