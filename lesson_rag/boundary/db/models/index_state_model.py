"""
Lesson index state ORM model.

One row per lesson that has ever been indexed. Holds the version counters
that make rebuilds compare-and-swap safe.

Dependencies: sqlalchemy, lesson_rag.boundary.db.base
System role: Index generation pointer and version guard
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lesson_rag.boundary.db.base import Base, TimestampMixin


class LessonIndexStateModel(Base, TimestampMixin):
    """
    Lesson index state ORM model.

    Invariants:
        active_version is None or purged_through < active_version <= latest_version

    Attributes:
        lesson_id: Lesson identifier (primary key)
        latest_version: Highest version ever allocated to a rebuild
        active_version: Visible generation; None means unindexed
        purged_through: Rebuilds with version <= this value are void
        last_error: Message of the most recent failed rebuild, cleared on success
    """

    __tablename__ = "lesson_index_states"

    lesson_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    latest_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active_version: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)
    purged_through: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True, default=None)
