"""API routers."""

from .chat import router as chat_router
from .health import router as health_router
from .lessons import router as lessons_router

__all__ = [
    "chat_router",
    "health_router",
    "lessons_router",
]
