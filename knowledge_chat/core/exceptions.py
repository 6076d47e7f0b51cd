"""
Exception hierarchy for the knowledge chat service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging, plus the
HTTP status, machine-readable code, and user-facing message the API layer
renders for them.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgeChatException(Exception):
    """Base exception for all knowledge chat errors."""

    status_code: int = 500
    code: str | None = None
    public_message: str = "Internal server error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KnowledgeChatException):
    """Raised when input validation fails. The message is shown to the caller."""

    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)
        self.public_message = message


class AuthenticationError(KnowledgeChatException):
    """Raised when a session id is presented without valid credentials."""

    status_code = 401
    code = "INVALID_SESSION"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize authentication error.

        Args:
            message: Error message shown to the caller
            code: Optional override of the machine-readable code
            details: Additional context
        """
        super().__init__(message, details)
        self.public_message = message
        if code:
            self.code = code


class RateLimitError(KnowledgeChatException):
    """Base class for rejected requests over a rate ceiling."""

    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"
    public_message = "Rate limit exceeded. Please try again later."


class AddressRateLimitError(RateLimitError):
    """Raised when a source address exhausts its window across all sessions."""

    code = "IP_RATE_LIMIT_EXCEEDED"
    public_message = (
        "Rate limit exceeded. Too many requests from your network. "
        "Please try again later."
    )


class SessionRateLimitError(RateLimitError):
    """Raised when a single session exhausts its window."""

    code = "SESSION_RATE_LIMIT_EXCEEDED"
    public_message = "Rate limit exceeded. Please wait before sending more messages."


class SessionCreationError(KnowledgeChatException):
    """Raised when a new chat session cannot be stored."""

    code = "SESSION_CREATION_FAILED"
    public_message = "Failed to create chat session"


class CompletionError(KnowledgeChatException):
    """Raised when the upstream LLM fails to produce a reply."""

    code = "COMPLETION_FAILED"
    public_message = "Sorry, I could not generate a reply right now. Please try again."

    def __init__(
        self,
        message: str,
        model: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize completion error.

        Args:
            message: Error message
            model: Model identifier that failed
            details: Additional context
        """
        details = details or {}
        if model:
            details["model"] = model
        super().__init__(message, details)


class EmbeddingError(KnowledgeChatException):
    """Raised when the query embedding cannot be produced."""

    pass


class VectorStoreError(KnowledgeChatException):
    """Raised when similarity search operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (search, fallback)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class AdminAccessError(KnowledgeChatException):
    """Raised when an admin endpoint is called without a valid admin key."""

    status_code = 403
    code = "ADMIN_ACCESS_DENIED"
    public_message = "Admin access denied"


class ClientDisconnectedError(KnowledgeChatException):
    """Raised when the caller went away before the turn finished."""

    status_code = 499
    code = "CLIENT_CLOSED_REQUEST"
    public_message = "Client closed request"
