"""
Cosine similarity ranking.

Brute-force scan of one lesson's chunks against a query embedding. Fine at
per-lesson scale (tens of chunks); an approximate index replacing it must
keep the same ordering contract: score descending, then chunk index
ascending.

Dependencies: math (stdlib), lesson_rag.core.exceptions, lesson_rag.models.chunk
System role: Retrieval ranking
"""

import math
from collections.abc import Iterable, Sequence

from lesson_rag.core.exceptions import DimensionMismatchError
from lesson_rag.models.chunk import LessonChunk, SearchHit

DEFAULT_LIMIT = 5


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        vec_a: First vector
        vec_b: Second vector

    Returns:
        float: Score in [-1, 1]; 0.0 when either vector has zero norm

    Raises:
        DimensionMismatchError: When the vectors differ in length
    """
    if len(vec_a) != len(vec_b):
        raise DimensionMismatchError(expected=len(vec_a), actual=len(vec_b))

    dot_product = math.fsum(a * b for a, b in zip(vec_a, vec_b))
    norm_a = math.sqrt(math.fsum(a * a for a in vec_a))
    norm_b = math.sqrt(math.fsum(b * b for b in vec_b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    # Rounding can push |score| a hair past 1 for parallel vectors
    return max(-1.0, min(1.0, dot_product / (norm_a * norm_b)))


def rank_chunks(
    query_embedding: Sequence[float],
    chunks: Iterable[LessonChunk],
    limit: int = DEFAULT_LIMIT,
) -> list[SearchHit]:
    """
    Rank chunks by similarity to a query embedding.

    Args:
        query_embedding: Embedded query text
        chunks: Candidate chunks (all chunks of one lesson)
        limit: Maximum number of hits to return

    Returns:
        list[SearchHit]: Top hits, score descending, ties by ascending chunk index

    Raises:
        DimensionMismatchError: When any chunk embedding differs in length from the query
    """
    if limit <= 0:
        return []

    scored = [
        SearchHit(
            text=chunk.text,
            chunk_index=chunk.chunk_index,
            score=cosine_similarity(query_embedding, chunk.embedding),
        )
        for chunk in chunks
    ]
    scored.sort(key=lambda hit: (-hit.score, hit.chunk_index))
    return scored[:limit]
