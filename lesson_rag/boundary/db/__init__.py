"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), create_all_tables(): Connection management
  - LessonModel, LessonChunkModel, LessonIndexStateModel: Tables
  - lesson_crud: Lesson lookup singleton

Dependencies: sqlalchemy, lesson_rag.configs
System role: Database adapter for lessons and their chunk index
"""

from lesson_rag.boundary.db.base import Base, TimestampMixin, UUIDMixin
from lesson_rag.boundary.db.connection import (
    create_all_tables,
    get_async_engine,
    get_async_session_factory,
)
from lesson_rag.boundary.db.models import LessonChunkModel, LessonIndexStateModel, LessonModel
from lesson_rag.boundary.db.CRUD import BaseCRUD, LessonCRUD, lesson_crud

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    # Connection
    "create_all_tables",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "LessonModel",
    "LessonChunkModel",
    "LessonIndexStateModel",
    # CRUD
    "BaseCRUD",
    "LessonCRUD",
    "lesson_crud",
]
