"""
Lesson similarity search service.

Embeds the query and ranks the active chunk set of one lesson by cosine
similarity. Brute force over the lesson's chunks, which stay in the tens.

Dependencies: lesson_rag.boundary, lesson_rag.core.similarity
System role: Retrieval stage of the grounded chat pipeline
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lesson_rag.boundary.db.CRUD.lesson_crud import lesson_crud
from lesson_rag.boundary.index.chunk_index import ChunkIndex
from lesson_rag.boundary.providers.embedding_provider import EmbeddingProvider
from lesson_rag.core.exceptions import NotFoundError, ValidationError
from lesson_rag.core.similarity import DEFAULT_LIMIT, rank_chunks
from lesson_rag.models.chunk import SearchHit
from lesson_rag.models.lesson import LessonTitle

logger = logging.getLogger(__name__)


class SearchService:
    """Query-side access to lesson indexes."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        chunk_index: ChunkIndex,
        embedding_provider: EmbeddingProvider,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        """
        Initialize search service.

        Args:
            session_factory: Session factory for lesson lookups
            chunk_index: Versioned chunk store
            embedding_provider: Embeds query text
            default_limit: Number of hits when the caller gives no limit
        """
        self._session_factory = session_factory
        self._chunk_index = chunk_index
        self._embedding_provider = embedding_provider
        self.default_limit = default_limit

    async def search(
        self,
        lesson_id: str,
        query_text: str,
        limit: int | None = None,
    ) -> list[SearchHit]:
        """
        Rank a lesson's chunks against a free-text query.

        Args:
            lesson_id: Lesson to search
            query_text: Question or keywords
            limit: Maximum hits (default_limit when None)

        Returns:
            list[SearchHit]: Hits, score descending, ties by ascending chunk index

        Raises:
            ValidationError: Missing lesson id, blank query or non-positive limit
            NotFoundError: Lesson unknown or not indexed
            ProviderError: Query embedding failed
            DimensionMismatchError: Index built with a different embedding model
        """
        if not lesson_id:
            raise ValidationError("lesson_id is required", field="lesson_id")
        query = (query_text or "").strip()
        if not query:
            raise ValidationError("query must not be empty", field="query")
        limit = self.default_limit if limit is None else limit
        if limit < 1:
            raise ValidationError("limit must be at least 1", field="limit")

        # One read of the active generation; checked before any embedding call
        chunks = await self._chunk_index.get_all(lesson_id)
        if not chunks:
            record = await self._chunk_index.get_record(lesson_id)
            if record is None or record.active_version is None:
                raise NotFoundError("index", lesson_id)
            return []

        query_embedding = await self._embedding_provider.embed(query)
        hits = rank_chunks(query_embedding, chunks, limit=limit)

        logger.info(
            f"{__name__}:search - Ranked {len(chunks)} chunks",
            extra={
                "lesson_id": lesson_id,
                "returned": len(hits),
                "top_score": hits[0].score if hits else None,
            },
        )
        return hits

    async def get_title(self, lesson_id: str) -> LessonTitle | None:
        """
        Look up a lesson's title.

        Returns:
            LessonTitle, or None if the lesson does not exist
        """
        async with self._session_factory() as session:
            title = await lesson_crud.get_title(session, lesson_id)
        return LessonTitle(title=title) if title is not None else None
