"""Versioned lesson chunk index."""

from lesson_rag.boundary.index.chunk_index import ChunkIndex, IndexRecord

__all__ = ["ChunkIndex", "IndexRecord"]
