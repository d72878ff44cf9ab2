"""
Shared test fixtures and configuration for entire test suite.

Provides: file-backed SQLite database, chunk index, embedding/generation
fakes, lesson seeding helper
Dependencies: pytest, sqlalchemy, langchain_core
System role: Test infrastructure and fixture management
"""

import re
from collections.abc import AsyncIterator

import pytest
from langchain_core.embeddings import Embeddings
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from lesson_rag.boundary.db.base import Base
from lesson_rag.boundary.db.CRUD import lesson_crud
from lesson_rag.boundary.index import ChunkIndex
from lesson_rag.boundary.providers.embedding_provider import EmbeddingProvider

VOCABULARY = [
    "jesus", "loves", "children", "compassion", "helps", "kids",
    "haiti", "prayer", "school", "water", "food", "hope",
]


class KeywordEmbeddings(Embeddings):
    """
    Bag-of-words embeddings over a fixed vocabulary.

    The last dimension is a constant so no vector is all zeros. Texts that
    share vocabulary words score higher, which makes rankings predictable.
    """

    def __init__(self, vocabulary: list[str] | None = None) -> None:
        self.vocabulary = vocabulary or VOCABULARY
        self.calls: list[str] = []

    def _vector(self, text: str) -> list[float]:
        words = re.findall(r"[a-z]+", text.lower())
        return [float(words.count(term)) for term in self.vocabulary] + [0.1]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._vector(text) for text in texts]

    def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        return self._vector(text)

    async def aembed_query(self, text: str) -> list[float]:
        return self.embed_query(text)


@pytest.fixture
def keyword_embeddings() -> KeywordEmbeddings:
    """Provide deterministic keyword embeddings."""
    return KeywordEmbeddings()


@pytest.fixture
def embedding_provider(keyword_embeddings: KeywordEmbeddings) -> EmbeddingProvider:
    """Provide embedding provider backed by keyword embeddings."""
    return EmbeddingProvider(keyword_embeddings, expected_dimension=len(VOCABULARY) + 1)


@pytest.fixture
async def session_factory(tmp_path) -> AsyncIterator[async_sessionmaker[AsyncSession]]:
    """
    Create a file-backed SQLite database for testing.

    A file database gives every session its own connection, so concurrent
    rebuilds and readers get real transaction isolation.

    Yields:
        async_sessionmaker: Session factory bound to a fresh schema
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'lesson_rag_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def chunk_index(session_factory: async_sessionmaker[AsyncSession]) -> ChunkIndex:
    """Provide chunk index over the test database."""
    return ChunkIndex(session_factory)


@pytest.fixture
def add_lesson(session_factory: async_sessionmaker[AsyncSession]):
    """Provide a helper that inserts or updates a lesson row."""

    async def _add_lesson(
        lesson_id: str,
        title: str = "Lesson",
        description: str = "",
        content: str = "",
        is_published: bool = True,
    ) -> None:
        fields = {"title": title, "description": description, "content": content, "is_published": is_published}
        async with session_factory() as session:
            if not await lesson_crud.update_by_id(session, lesson_id, **fields):
                await lesson_crud.create(session, id=lesson_id, **fields)
            await session.commit()

    return _add_lesson
