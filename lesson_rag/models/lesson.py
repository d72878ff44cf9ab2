"""
Lesson and index lifecycle schemas.

Dependencies: pydantic
System role: Lesson content snapshots and index state contracts
"""

from enum import Enum

from pydantic import BaseModel, Field


class LessonContent(BaseModel):
    """Snapshot of the lesson fields that feed the index."""

    lesson_id: str
    title: str
    description: str = ""
    content: str = ""
    is_published: bool = False


class LessonTitle(BaseModel):
    """Title lookup result used to label the grounding prompt."""

    title: str


class IndexStatus(str, Enum):
    """
    Per-lesson index states.

    UNINDEXED: No queryable chunks (initial, after purge, or never built)
    INDEXING: At least one rebuild is in flight
    INDEXED: A stable generation is queryable
    """

    UNINDEXED = "unindexed"
    INDEXING = "indexing"
    INDEXED = "indexed"


class IndexState(BaseModel):
    """Observable index state of one lesson."""

    lesson_id: str
    status: IndexStatus
    version: int | None = Field(default=None, description="Active generation, if any")
    chunk_count: int = 0
    last_error: str | None = None


class RebuildOutcome(str, Enum):
    """Result of a single rebuild attempt."""

    APPLIED = "applied"
    STALE = "stale"
    PURGED = "purged"
    FAILED = "failed"


class RebuildResult(BaseModel):
    """Outcome of one rebuild, returned to callers that await it."""

    lesson_id: str
    version: int | None = None
    outcome: RebuildOutcome
    chunk_count: int = 0
    error: str | None = None


class ReindexAllResult(BaseModel):
    """Summary of a batch reindex over every published lesson."""

    processed: int = 0
    errors: list[str] = Field(default_factory=list)


class LessonEventType(str, Enum):
    """Mutation events emitted by the content system."""

    PUBLISHED = "published"
    UPDATED = "updated"
    UNPUBLISHED = "unpublished"
    DELETED = "deleted"


class LessonEvent(BaseModel):
    """Lesson mutation notification."""

    event: LessonEventType
    is_published: bool = Field(
        default=True,
        description="Publish flag after the mutation (consulted for 'updated')",
    )
