"""
Observability module.

Provides logging configuration, correlation ID tracking, and HTTP middleware.
"""

from lesson_rag.observability.correlation import get_correlation_id, set_correlation_id
from lesson_rag.observability.logger import configure_logging

__all__ = ["configure_logging", "get_correlation_id", "set_correlation_id"]
