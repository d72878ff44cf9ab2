"""
Dependency injection container.

Builds every component from Settings once and hands the instances to
routers through FastAPI Depends factories. Resolving a dependency never
touches provider credentials: the Google clients are built on the first
embed or stream call, which raises ProviderError when no key is set.

Dependencies: lesson_rag.configs, lesson_rag.application, lesson_rag.boundary
System role: DI container for service injection
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from lesson_rag.application.services import ChatOrchestrator, IndexLifecycleManager, SearchService
from lesson_rag.boundary.db.connection import get_async_engine, get_async_session_factory
from lesson_rag.boundary.index import ChunkIndex
from lesson_rag.boundary.providers import (
    EmbeddingProvider,
    GenerationProvider,
    create_embedding_provider,
    create_generation_provider,
)
from lesson_rag.configs import Settings, get_settings
from lesson_rag.core.chunker import TextChunker


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._chunk_index: ChunkIndex | None = None
        self._embedding_provider: EmbeddingProvider | None = None
        self._generation_provider: GenerationProvider | None = None
        self._lifecycle: IndexLifecycleManager | None = None
        self._search_service: SearchService | None = None
        self._chat_orchestrator: ChatOrchestrator | None = None

    @property
    def engine(self) -> AsyncEngine:
        """Get cached database engine."""
        if self._engine is None:
            self._engine = get_async_engine(self.settings.database)
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        """Get cached session factory."""
        if self._session_factory is None:
            self._session_factory = get_async_session_factory(self.engine)
        return self._session_factory

    @property
    def chunk_index(self) -> ChunkIndex:
        """Get cached chunk index."""
        if self._chunk_index is None:
            self._chunk_index = ChunkIndex(self.session_factory)
        return self._chunk_index

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        """Get cached embedding provider."""
        if self._embedding_provider is None:
            self._embedding_provider = create_embedding_provider(self.settings.providers)
        return self._embedding_provider

    @property
    def generation_provider(self) -> GenerationProvider:
        """Get cached generation provider."""
        if self._generation_provider is None:
            self._generation_provider = create_generation_provider(self.settings.providers)
        return self._generation_provider

    @property
    def lifecycle(self) -> IndexLifecycleManager:
        """Get cached index lifecycle manager."""
        if self._lifecycle is None:
            indexing = self.settings.indexing
            self._lifecycle = IndexLifecycleManager(
                session_factory=self.session_factory,
                chunk_index=self.chunk_index,
                embedding_provider=self.embedding_provider,
                chunker=TextChunker(indexing.chunk_size, indexing.chunk_overlap),
                max_concurrent_rebuilds=indexing.max_concurrent_rebuilds,
            )
        return self._lifecycle

    @property
    def search_service(self) -> SearchService:
        """Get cached search service."""
        if self._search_service is None:
            self._search_service = SearchService(
                session_factory=self.session_factory,
                chunk_index=self.chunk_index,
                embedding_provider=self.embedding_provider,
                default_limit=self.settings.indexing.top_k,
            )
        return self._search_service

    @property
    def chat_orchestrator(self) -> ChatOrchestrator:
        """Get cached chat orchestrator."""
        if self._chat_orchestrator is None:
            self._chat_orchestrator = ChatOrchestrator(
                search_service=self.search_service,
                generation_provider=self.generation_provider,
                top_k=self.settings.indexing.top_k,
            )
        return self._chat_orchestrator

    async def close(self) -> None:
        """Stop background rebuilds and release the database engine."""
        if self._lifecycle is not None:
            await self._lifecycle.shutdown()
        if self._engine is not None:
            await self._engine.dispose()
        self.clear()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._engine = None
        self._session_factory = None
        self._chunk_index = None
        self._embedding_provider = None
        self._generation_provider = None
        self._lifecycle = None
        self._search_service = None
        self._chat_orchestrator = None


# Global service cache
_service_cache: ServiceCache | None = None


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    global _service_cache
    if _service_cache is None:
        _service_cache = ServiceCache()
    return _service_cache


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the shared session factory."""
    return get_service_cache().session_factory


def get_lifecycle_manager() -> IndexLifecycleManager:
    """Get the index lifecycle manager."""
    return get_service_cache().lifecycle


def get_search_service() -> SearchService:
    """Get the lesson search service."""
    return get_service_cache().search_service


def get_chat_orchestrator() -> ChatOrchestrator:
    """Get the chat orchestrator."""
    return get_service_cache().chat_orchestrator
