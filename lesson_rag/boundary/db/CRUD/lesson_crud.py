"""
Lesson CRUD operations.

Read-side queries over the mirrored lesson table used by indexing and chat.

Dependencies: sqlalchemy, lesson_rag.boundary.db.models.lesson_model
System role: Lesson lookup for the retrieval core
"""

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lesson_rag.boundary.db.CRUD.base_crud import BaseCRUD
from lesson_rag.boundary.db.models.lesson_model import LessonModel
from lesson_rag.models.lesson import LessonContent


class LessonCRUD(BaseCRUD[LessonModel]):
    """CRUD operations for LessonModel."""

    def __init__(self) -> None:
        """Initialize LessonCRUD with LessonModel."""
        super().__init__(LessonModel)

    async def get_content(self, session: AsyncSession, lesson_id: str) -> LessonContent | None:
        """
        Load the fields that feed the index.

        Args:
            session: Async database session
            lesson_id: Lesson identifier

        Returns:
            LessonContent snapshot, or None if the lesson does not exist
        """
        lesson = await self.get_by_id(session, lesson_id)
        if lesson is None:
            return None
        return LessonContent(
            lesson_id=lesson.id,
            title=lesson.title,
            description=lesson.description or "",
            content=lesson.content or "",
            is_published=lesson.is_published,
        )

    async def get_title(self, session: AsyncSession, lesson_id: str) -> str | None:
        """
        Look up a lesson's title.

        Args:
            session: Async database session
            lesson_id: Lesson identifier

        Returns:
            Title, or None if the lesson does not exist
        """
        stmt = select(LessonModel.title).where(LessonModel.id == lesson_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_published_ids(self, session: AsyncSession) -> Sequence[str]:
        """
        List identifiers of all published lessons.

        Returns:
            Lesson ids ordered by id for reproducible batch runs
        """
        stmt = select(LessonModel.id).where(LessonModel.is_published.is_(True)).order_by(LessonModel.id)
        result = await session.execute(stmt)
        return result.scalars().all()


lesson_crud = LessonCRUD()
