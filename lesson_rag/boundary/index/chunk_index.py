"""
Versioned lesson chunk index.

Durable store of (lesson, chunk_index, text, embedding) records using an
arena + generation scheme. A rebuild writes its chunks under a freshly
allocated version without touching the visible generation, then a single
transaction swaps the lesson's active_version pointer (compare-and-swap on
the version counters) and garbage-collects every other generation.

Readers select through the pointer in one statement, so they observe either
the old chunk set or the new one, never a mixture.

Dependencies: sqlalchemy, lesson_rag.boundary.db
System role: Chunk persistence for retrieval
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lesson_rag.boundary.db.models.chunk_model import LessonChunkModel
from lesson_rag.boundary.db.models.index_state_model import LessonIndexStateModel
from lesson_rag.models.chunk import LessonChunk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexRecord:
    """Snapshot of a lesson's index state row."""

    lesson_id: str
    latest_version: int
    active_version: int | None
    purged_through: int
    last_error: str | None


class ChunkIndex:
    """
    Chunk store with per-lesson generations.

    Write transactions are serialized in-process; SQLite allows a single
    writer anyway, and PostgreSQL sees the same conditional UPDATEs.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """
        Initialize index over a session factory.

        Args:
            session_factory: Async session factory bound to the index database
        """
        self._session_factory = session_factory
        self._write_lock = asyncio.Lock()

    async def allocate_version(self, lesson_id: str) -> int:
        """
        Reserve the next rebuild version for a lesson.

        Args:
            lesson_id: Lesson identifier

        Returns:
            int: New version, strictly greater than any previously allocated
        """
        async with self._write_lock, self._session_factory() as session:
            await self._ensure_state(session, lesson_id)
            await session.execute(
                update(LessonIndexStateModel)
                .where(LessonIndexStateModel.lesson_id == lesson_id)
                .values(latest_version=LessonIndexStateModel.latest_version + 1)
            )
            version = await session.scalar(
                select(LessonIndexStateModel.latest_version).where(
                    LessonIndexStateModel.lesson_id == lesson_id
                )
            )
            await session.commit()
        return int(version)

    async def write_generation(
        self,
        lesson_id: str,
        version: int,
        chunks: Sequence[tuple[str, list[float]]],
    ) -> None:
        """
        Store a complete chunk set under a version without making it visible.

        Args:
            lesson_id: Lesson identifier
            version: Version returned by allocate_version
            chunks: (text, embedding) pairs in chunk order
        """
        if not chunks:
            return
        async with self._write_lock, self._session_factory() as session:
            session.add_all(
                LessonChunkModel(
                    lesson_id=lesson_id,
                    version=version,
                    chunk_index=chunk_index,
                    text=text,
                    embedding=list(embedding),
                )
                for chunk_index, (text, embedding) in enumerate(chunks)
            )
            await session.commit()

    async def activate(self, lesson_id: str, version: int) -> bool:
        """
        Make a written generation visible if it is still the newest.

        The swap succeeds only when the version is newer than the active one
        and newer than the last purge. Either way, every generation other
        than the active one is deleted.

        Args:
            lesson_id: Lesson identifier
            version: Generation to publish

        Returns:
            bool: True if the generation became active, False if it was stale
        """
        async with self._write_lock, self._session_factory() as session:
            result = await session.execute(
                update(LessonIndexStateModel)
                .where(
                    LessonIndexStateModel.lesson_id == lesson_id,
                    LessonIndexStateModel.purged_through < version,
                    or_(
                        LessonIndexStateModel.active_version.is_(None),
                        LessonIndexStateModel.active_version < version,
                    ),
                )
                .values(active_version=version, last_error=None)
            )
            applied = result.rowcount == 1

            if applied:
                await session.execute(
                    delete(LessonChunkModel).where(
                        LessonChunkModel.lesson_id == lesson_id,
                        # In-flight newer generations stay until they finish
                        LessonChunkModel.version < version,
                    )
                )
            else:
                await session.execute(
                    delete(LessonChunkModel).where(
                        LessonChunkModel.lesson_id == lesson_id,
                        LessonChunkModel.version == version,
                    )
                )
            await session.commit()
        return applied

    async def replace_all(
        self,
        lesson_id: str,
        version: int,
        chunks: Sequence[tuple[str, list[float]]],
    ) -> bool:
        """
        Swap a lesson's chunk set for a new one as a single visible step.

        Args:
            lesson_id: Lesson identifier
            version: Version returned by allocate_version
            chunks: (text, embedding) pairs in chunk order

        Returns:
            bool: True if applied, False if discarded as stale
        """
        try:
            await self.write_generation(lesson_id, version, chunks)
        except Exception:
            await self.discard_generation(lesson_id, version)
            raise
        return await self.activate(lesson_id, version)

    async def discard_generation(
        self,
        lesson_id: str,
        version: int,
        error: str | None = None,
    ) -> None:
        """
        Drop a generation that will never be activated.

        Args:
            lesson_id: Lesson identifier
            version: Generation to delete
            error: Failure message recorded on the state row
        """
        async with self._write_lock, self._session_factory() as session:
            await session.execute(
                delete(LessonChunkModel).where(
                    LessonChunkModel.lesson_id == lesson_id,
                    LessonChunkModel.version == version,
                )
            )
            if error is not None:
                await session.execute(
                    update(LessonIndexStateModel)
                    .where(LessonIndexStateModel.lesson_id == lesson_id)
                    .values(last_error=error)
                )
            await session.commit()

    async def delete_all(self, lesson_id: str, through_version: int | None = None) -> None:
        """
        Remove a lesson's chunks and void the rebuilds started so far.

        Args:
            lesson_id: Lesson identifier
            through_version: Only void versions up to this one; defaults to
                every version allocated so far
        """
        async with self._write_lock, self._session_factory() as session:
            state = await self._ensure_state(session, lesson_id)
            limit = state.latest_version if through_version is None else through_version

            state.purged_through = max(state.purged_through, limit)
            if state.active_version is not None and state.active_version <= state.purged_through:
                state.active_version = None
            state.last_error = None

            await session.execute(
                delete(LessonChunkModel).where(
                    LessonChunkModel.lesson_id == lesson_id,
                    LessonChunkModel.version <= limit,
                )
            )
            await session.commit()

    async def get_all(self, lesson_id: str) -> list[LessonChunk]:
        """
        Read the active chunk set of a lesson.

        Args:
            lesson_id: Lesson identifier

        Returns:
            list[LessonChunk]: Chunks ordered by chunk_index; empty if unindexed
        """
        stmt = (
            select(LessonChunkModel)
            .join(
                LessonIndexStateModel,
                and_(
                    LessonIndexStateModel.lesson_id == LessonChunkModel.lesson_id,
                    LessonIndexStateModel.active_version == LessonChunkModel.version,
                ),
            )
            .where(LessonChunkModel.lesson_id == lesson_id)
            .order_by(LessonChunkModel.chunk_index)
        )
        async with self._session_factory() as session:
            rows = (await session.execute(stmt)).scalars().all()

        return [
            LessonChunk(
                lesson_id=row.lesson_id,
                chunk_index=row.chunk_index,
                text=row.text,
                embedding=row.embedding,
                created_at=row.created_at,
            )
            for row in rows
        ]

    async def count_active(self, lesson_id: str) -> int:
        """Number of chunks in the lesson's active generation."""
        stmt = (
            select(func.count(LessonChunkModel.id))
            .join(
                LessonIndexStateModel,
                and_(
                    LessonIndexStateModel.lesson_id == LessonChunkModel.lesson_id,
                    LessonIndexStateModel.active_version == LessonChunkModel.version,
                ),
            )
            .where(LessonChunkModel.lesson_id == lesson_id)
        )
        async with self._session_factory() as session:
            return int(await session.scalar(stmt) or 0)

    async def get_record(self, lesson_id: str) -> IndexRecord | None:
        """
        Read the index state row of a lesson.

        Returns:
            IndexRecord, or None if the lesson was never indexed or purged
        """
        async with self._session_factory() as session:
            state = await session.get(LessonIndexStateModel, lesson_id)
            if state is None:
                return None
            return IndexRecord(
                lesson_id=state.lesson_id,
                latest_version=state.latest_version,
                active_version=state.active_version,
                purged_through=state.purged_through,
                last_error=state.last_error,
            )

    async def _ensure_state(self, session: AsyncSession, lesson_id: str) -> LessonIndexStateModel:
        state = await session.get(LessonIndexStateModel, lesson_id, with_for_update=True)
        if state is None:
            state = LessonIndexStateModel(lesson_id=lesson_id, latest_version=0, purged_through=0)
            session.add(state)
            await session.flush()
        return state
