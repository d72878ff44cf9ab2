"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    ServiceCache,
    get_chat_orchestrator,
    get_lifecycle_manager,
    get_search_service,
    get_service_cache,
    get_session_factory,
)

__all__ = [
    "ServiceCache",
    "get_chat_orchestrator",
    "get_lifecycle_manager",
    "get_search_service",
    "get_service_cache",
    "get_session_factory",
]
