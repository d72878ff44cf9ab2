"""
Router utility functions.

Contains helper functions extracted from router endpoints to keep them clean.
"""

from lesson_rag.api.routers.router_utils.error_mapping import (
    GENERIC_PROVIDER_MESSAGE,
    to_http_exception,
)

__all__ = [
    "GENERIC_PROVIDER_MESSAGE",
    "to_http_exception",
]
