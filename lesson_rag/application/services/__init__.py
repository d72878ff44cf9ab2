"""Service orchestrators."""

from .chat_orchestrator import ChatOrchestrator, ChatTurn
from .index_lifecycle import IndexLifecycleManager
from .search_service import SearchService

__all__ = [
    "ChatOrchestrator",
    "ChatTurn",
    "IndexLifecycleManager",
    "SearchService",
]
