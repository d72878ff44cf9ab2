"""External model provider adapters (embeddings and answer generation)."""

from lesson_rag.boundary.providers.embedding_provider import (
    EmbeddingProvider,
    create_embedding_provider,
)
from lesson_rag.boundary.providers.generation_provider import (
    GenerationProvider,
    create_generation_provider,
)

__all__ = [
    "EmbeddingProvider",
    "GenerationProvider",
    "create_embedding_provider",
    "create_generation_provider",
]
