"""
Lesson chunk ORM model.

Stores every generation of a lesson's chunk set. Only the generation named
by LessonIndexStateModel.active_version is visible to readers; others are
either being built or awaiting garbage collection.

Dependencies: sqlalchemy, lesson_rag.boundary.db.base
System role: Durable chunk + embedding storage
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lesson_rag.boundary.db.base import Base, UUIDMixin, utcnow


class LessonChunkModel(Base, UUIDMixin):
    """
    Lesson chunk ORM model.

    Attributes:
        id: UUID primary key
        lesson_id: Owning lesson; not a foreign key, the lesson row is mirrored from the content system
        version: Generation the chunk belongs to
        chunk_index: 0-based ordinal, dense within (lesson_id, version)
        text: Plain-text slice
        embedding: Vector as a JSON array of floats
        created_at: Insertion timestamp (UTC)
    """

    __tablename__ = "lesson_chunks"
    __table_args__ = (
        UniqueConstraint("lesson_id", "version", "chunk_index", name="uq_lesson_chunk_slot"),
        Index("ix_lesson_chunks_lesson_version", "lesson_id", "version"),
    )

    lesson_id: Mapped[str] = mapped_column(String(64), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
