"""
Chunk domain models.

Indexed lesson chunks, ranked search hits, and chunk statistics.

Dependencies: pydantic
System role: Chunk data structures shared by index, search and API layers
"""

from datetime import datetime

from pydantic import BaseModel, Field


class LessonChunk(BaseModel):
    """One embedded slice of a lesson's plain text."""

    lesson_id: str = Field(description="Owning lesson identifier")
    chunk_index: int = Field(ge=0, description="0-based ordinal within the lesson")
    text: str = Field(min_length=1, description="Plain-text slice")
    embedding: list[float] = Field(description="Embedding vector")
    created_at: datetime | None = Field(default=None, description="Insertion timestamp (UTC)")


class SearchHit(BaseModel):
    """Single ranked result from lesson similarity search."""

    text: str = Field(description="Chunk text")
    chunk_index: int = Field(description="Chunk ordinal within the lesson")
    score: float = Field(ge=-1.0, le=1.0, description="Cosine similarity to the query")


class ChunkStat(BaseModel):
    """Size information for one chunk."""

    chunk_index: int
    text_length: int
    word_count: int


class ChunkStats(BaseModel):
    """Chunk statistics for a lesson's active index (debugging aid)."""

    lesson_id: str
    chunk_count: int
    chunks: list[ChunkStat] = Field(default_factory=list)
