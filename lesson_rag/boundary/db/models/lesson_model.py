"""
Lesson ORM model.

Read-side mirror of the lesson records owned by the content-management
system. The retrieval service only reads these rows.

Dependencies: sqlalchemy, lesson_rag.boundary.db.base
System role: Source documents for indexing
"""

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lesson_rag.boundary.db.base import Base, TimestampMixin


class LessonModel(Base, TimestampMixin):
    """
    Lesson ORM model.

    Attributes:
        id: Stable lesson identifier assigned by the content system
        title: Lesson title (labels the grounding prompt)
        description: Short description, indexed with the body
        content: Rich-text (HTML) lesson body
        is_published: Only published lessons are indexed
    """

    __tablename__ = "lessons"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
