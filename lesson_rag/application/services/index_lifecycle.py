"""
Index lifecycle manager.

Reacts to lesson publish/update/unpublish/delete by rebuilding or purging the
lesson's chunk index. Rebuilds run as background asyncio tasks decoupled
from the mutation that scheduled them, so a query issued right after an
update may still see the previous index version until the rebuild lands.

Rebuild flow:
1. Allocate a new version (monotonic per lesson)
2. Snapshot lesson content
3. Normalize, chunk, embed each chunk sequentially
4. Write the generation and compare-and-swap it into place

Dependencies: lesson_rag.boundary, lesson_rag.core
System role: Keeps the chunk index consistent with lesson content
"""

import asyncio
import logging
from collections import Counter

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lesson_rag.boundary.db.CRUD.lesson_crud import lesson_crud
from lesson_rag.boundary.index.chunk_index import ChunkIndex
from lesson_rag.boundary.providers.embedding_provider import EmbeddingProvider
from lesson_rag.core.chunker import TextChunker
from lesson_rag.core.exceptions import LessonRagException, NotFoundError
from lesson_rag.core.normalizer import compose_lesson_text
from lesson_rag.models.chunk import ChunkStat, ChunkStats
from lesson_rag.models.lesson import (
    IndexState,
    IndexStatus,
    LessonEvent,
    LessonEventType,
    RebuildOutcome,
    RebuildResult,
    ReindexAllResult,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT_REBUILDS = 4


class IndexLifecycleManager:
    """
    Schedules and runs per-lesson index rebuilds and purges.

    Rebuilds for different lessons run in parallel up to
    max_concurrent_rebuilds. Rebuilds for the same lesson may overlap; the
    chunk index version guard makes the latest-started one win.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        chunk_index: ChunkIndex,
        embedding_provider: EmbeddingProvider,
        chunker: TextChunker,
        max_concurrent_rebuilds: int = DEFAULT_MAX_CONCURRENT_REBUILDS,
    ) -> None:
        """
        Initialize lifecycle manager.

        Args:
            session_factory: Session factory for lesson lookups
            chunk_index: Versioned chunk store
            embedding_provider: Embeds chunk text
            chunker: Configured word-window chunker
            max_concurrent_rebuilds: Upper bound on rebuilds embedding at once
        """
        self._session_factory = session_factory
        self._chunk_index = chunk_index
        self._embedding_provider = embedding_provider
        self._chunker = chunker
        self._semaphore = asyncio.Semaphore(max_concurrent_rebuilds)
        self._tasks: set[asyncio.Task] = set()
        self._in_flight: Counter[str] = Counter()

    def reindex(self, lesson_id: str) -> asyncio.Task:
        """
        Schedule a background rebuild and return immediately.

        Failures are logged by the task's done callback and never reach the
        caller.

        Args:
            lesson_id: Lesson to rebuild

        Returns:
            asyncio.Task: Handle resolving to the RebuildResult
        """
        task = asyncio.create_task(self.rebuild(lesson_id), name=f"reindex:{lesson_id}")
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        logger.info(f"{__name__}:reindex - Scheduled rebuild", extra={"lesson_id": lesson_id})
        return task

    async def rebuild(self, lesson_id: str) -> RebuildResult:
        """
        Rebuild a lesson's index from its current content.

        A failed rebuild leaves the previous generation untouched.

        Args:
            lesson_id: Lesson to rebuild

        Returns:
            RebuildResult: applied, stale (superseded), purged (lesson not
            published) or failed
        """
        self._in_flight[lesson_id] += 1
        try:
            return await self._rebuild(lesson_id)
        finally:
            self._in_flight[lesson_id] -= 1
            if self._in_flight[lesson_id] <= 0:
                del self._in_flight[lesson_id]

    async def _rebuild(self, lesson_id: str) -> RebuildResult:
        version = await self._chunk_index.allocate_version(lesson_id)
        log_extra = {"lesson_id": lesson_id, "version": version}
        logger.info(f"{__name__}:rebuild - Indexing started", extra=log_extra)

        async with self._session_factory() as session:
            lesson = await lesson_crud.get_content(session, lesson_id)

        if lesson is None:
            error = NotFoundError("lesson", lesson_id)
            logger.warning(f"{__name__}:rebuild - {error.message}; purging index", extra=log_extra)
            await self.purge_index(lesson_id, through_version=version)
            return RebuildResult(
                lesson_id=lesson_id,
                version=version,
                outcome=RebuildOutcome.FAILED,
                error=error.message,
            )

        if not lesson.is_published:
            logger.info(f"{__name__}:rebuild - Lesson not published; purging index", extra=log_extra)
            await self.purge_index(lesson_id, through_version=version)
            return RebuildResult(lesson_id=lesson_id, version=version, outcome=RebuildOutcome.PURGED)

        text = compose_lesson_text(lesson.title, lesson.description, lesson.content)
        pieces = self._chunker.chunk(text)

        try:
            async with self._semaphore:
                embedded: list[tuple[str, list[float]]] = []
                for piece in pieces:
                    embedded.append((piece, await self._embedding_provider.embed(piece)))
            applied = await self._chunk_index.replace_all(lesson_id, version, embedded)
        except LessonRagException as e:
            logger.error(
                f"{__name__}:rebuild - Rebuild failed, previous index kept: {type(e).__name__}: {e.message}",
                extra=log_extra,
            )
            await self._chunk_index.discard_generation(lesson_id, version, error=e.message)
            return RebuildResult(
                lesson_id=lesson_id,
                version=version,
                outcome=RebuildOutcome.FAILED,
                error=e.message,
            )

        if not applied:
            logger.info(f"{__name__}:rebuild - Superseded by a newer rebuild or purge; discarded", extra=log_extra)
            return RebuildResult(lesson_id=lesson_id, version=version, outcome=RebuildOutcome.STALE)

        logger.info(f"{__name__}:rebuild - Indexed", extra={**log_extra, "chunk_count": len(embedded)})
        return RebuildResult(
            lesson_id=lesson_id,
            version=version,
            outcome=RebuildOutcome.APPLIED,
            chunk_count=len(embedded),
        )

    async def purge_index(self, lesson_id: str, through_version: int | None = None) -> None:
        """
        Remove a lesson's chunks and void the rebuilds started so far.

        Args:
            lesson_id: Lesson to purge
            through_version: Leave rebuilds newer than this version alone
        """
        await self._chunk_index.delete_all(lesson_id, through_version=through_version)
        logger.info(f"{__name__}:purge_index - Index purged", extra={"lesson_id": lesson_id})

    async def handle_event(self, lesson_id: str, event: LessonEvent) -> str:
        """
        Map a content-system mutation to a lifecycle action.

        Args:
            lesson_id: Mutated lesson
            event: Mutation event

        Returns:
            str: "reindex" or "purge"
        """
        wants_index = event.event in (LessonEventType.PUBLISHED, LessonEventType.UPDATED) and event.is_published

        if wants_index:
            self.reindex(lesson_id)
            return "reindex"

        await self.purge_index(lesson_id)
        return "purge"

    async def get_state(self, lesson_id: str) -> IndexState:
        """Report the observable index state of a lesson."""
        record = await self._chunk_index.get_record(lesson_id)
        active_version = record.active_version if record else None
        chunk_count = await self._chunk_index.count_active(lesson_id) if active_version is not None else 0

        if self._in_flight.get(lesson_id):
            status = IndexStatus.INDEXING
        elif active_version is not None:
            status = IndexStatus.INDEXED
        else:
            status = IndexStatus.UNINDEXED

        return IndexState(
            lesson_id=lesson_id,
            status=status,
            version=active_version,
            chunk_count=chunk_count,
            last_error=record.last_error if record else None,
        )

    async def reindex_all(self) -> ReindexAllResult:
        """
        Rebuild every published lesson, one after another.

        Returns:
            ReindexAllResult: Count of lessons processed and per-lesson errors
        """
        async with self._session_factory() as session:
            lesson_ids = await lesson_crud.get_published_ids(session)

        logger.info(f"{__name__}:reindex_all - Found {len(lesson_ids)} published lessons")
        result = ReindexAllResult()

        for lesson_id in lesson_ids:
            try:
                rebuild = await self.rebuild(lesson_id)
            except Exception as e:
                logger.exception(f"{__name__}:reindex_all - Lesson {lesson_id} crashed")
                result.errors.append(f"Lesson {lesson_id}: {e}")
                continue

            if rebuild.outcome == RebuildOutcome.FAILED:
                result.errors.append(f"Lesson {lesson_id}: {rebuild.error}")
            else:
                result.processed += 1

        logger.info(
            f"{__name__}:reindex_all - Done",
            extra={"processed": result.processed, "errors": len(result.errors)},
        )
        return result

    async def get_chunk_stats(self, lesson_id: str) -> ChunkStats:
        """Chunk sizes of a lesson's active index."""
        chunks = await self._chunk_index.get_all(lesson_id)
        return ChunkStats(
            lesson_id=lesson_id,
            chunk_count=len(chunks),
            chunks=[
                ChunkStat(
                    chunk_index=chunk.chunk_index,
                    text_length=len(chunk.text),
                    word_count=len(chunk.text.split()),
                )
                for chunk in chunks
            ],
        )

    async def wait_idle(self) -> None:
        """Wait until every scheduled rebuild has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel outstanding rebuilds; their generations are never activated."""
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(
                f"{__name__}:reindex - Background rebuild crashed: {type(error).__name__}: {error}",
                exc_info=error,
            )
