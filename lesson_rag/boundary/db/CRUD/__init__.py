"""
CRUD operations for database models.

Exports the base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from lesson_rag.boundary.db.CRUD import lesson_crud

    title = await lesson_crud.get_title(db, lesson_id)
"""

from lesson_rag.boundary.db.CRUD.base_crud import BaseCRUD
from lesson_rag.boundary.db.CRUD.lesson_crud import LessonCRUD, lesson_crud

__all__ = ["BaseCRUD", "LessonCRUD", "lesson_crud"]
