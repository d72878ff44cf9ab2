"""
Domain error to HTTP status mapping.

ValidationError -> 400, NotFoundError -> 404, everything else -> 500 with a
generic message so provider internals never reach the client.

Dependencies: fastapi, lesson_rag.core.exceptions
System role: Single translation point from domain errors to HTTP responses
"""

from fastapi import HTTPException

from lesson_rag.core.exceptions import LessonRagException, NotFoundError, ValidationError

GENERIC_PROVIDER_MESSAGE = "The assistant is temporarily unavailable. Please try again later."


def status_code_for(exc: LessonRagException) -> int:
    """HTTP status for a domain exception."""
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, NotFoundError):
        return 404
    return 500


def public_message(exc: LessonRagException) -> str:
    """Message safe to show to API clients."""
    if status_code_for(exc) == 500:
        return GENERIC_PROVIDER_MESSAGE
    return exc.message


def to_http_exception(exc: LessonRagException) -> HTTPException:
    """
    Convert a domain exception into an HTTPException.

    Args:
        exc: Raised domain exception

    Returns:
        HTTPException: With status code and client-safe detail
    """
    return HTTPException(status_code=status_code_for(exc), detail=public_message(exc))
