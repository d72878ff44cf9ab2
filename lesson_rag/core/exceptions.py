"""
Exception hierarchy for the lesson retrieval service.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class LessonRagException(Exception):
    """Base exception for all lesson retrieval errors."""

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


class ValidationError(LessonRagException):
    """Raised when a request or configuration value is malformed."""

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


class NotFoundError(LessonRagException):
    """Raised when a lesson or its chunk index cannot be found."""

    def __init__(
        self,
        resource: str,
        resource_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            resource: Kind of resource that is missing ("lesson", "index")
            resource_id: Identifier that was looked up
            details: Additional context
        """
        details = details or {}
        details["resource"] = resource
        details["resource_id"] = resource_id
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource.capitalize()} not found: {resource_id}", details)


class ProviderError(LessonRagException):
    """Raised when the embedding or generation service fails or is misconfigured."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            provider: Which provider failed ("embedding", "generation")
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        self.provider = provider
        super().__init__(message, details)


class DimensionMismatchError(LessonRagException):
    """
    Raised when two vectors that must be compared have different lengths.

    Usually means the embedding model changed without a full reindex.
    """

    def __init__(self, expected: int, actual: int, details: dict[str, Any] | None = None) -> None:
        """
        Initialize dimension mismatch error.

        Args:
            expected: Length of the reference vector
            actual: Length of the offending vector
            details: Additional context
        """
        details = details or {}
        details["expected"] = expected
        details["actual"] = actual
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}; reindex required",
            details,
        )
