"""ORM models registered on Base.metadata."""

from lesson_rag.boundary.db.models.chunk_model import LessonChunkModel
from lesson_rag.boundary.db.models.index_state_model import LessonIndexStateModel
from lesson_rag.boundary.db.models.lesson_model import LessonModel

__all__ = ["LessonModel", "LessonChunkModel", "LessonIndexStateModel"]
