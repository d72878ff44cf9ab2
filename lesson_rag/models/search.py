"""
Search request/response schemas.

Dependencies: pydantic
System role: Search API contracts
"""

from pydantic import BaseModel, Field

from lesson_rag.models.chunk import SearchHit


class SearchRequest(BaseModel):
    """Request schema for lesson similarity search."""

    query: str = Field(description="Free-text question")
    limit: int | None = Field(default=None, ge=1, le=50, description="Maximum hits (default top-K)")


class SearchResponse(BaseModel):
    """Ranked hits, most similar first."""

    results: list[SearchHit]
