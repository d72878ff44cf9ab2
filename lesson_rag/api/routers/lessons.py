"""
Lesson index and search API endpoints.

Routes:
- POST /lessons/index - Rebuild the index of every published lesson
- POST /lessons/{lesson_id}/events - Lesson mutation hook (schedules rebuild or purge)
- GET /lessons/{lesson_id}/index - Index state
- GET /lessons/{lesson_id}/chunks/stats - Chunk sizes of the active index
- GET /lessons/{lesson_id}/title - Lesson title
- POST /lessons/{lesson_id}/search - Similarity search over a lesson

Dependencies: lesson_rag.application.services
System role: Index lifecycle and retrieval HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from lesson_rag.api.deps import get_lifecycle_manager, get_search_service
from lesson_rag.api.routers.router_utils import to_http_exception
from lesson_rag.application.services import IndexLifecycleManager, SearchService
from lesson_rag.core.exceptions import LessonRagException
from lesson_rag.models.chunk import ChunkStats
from lesson_rag.models.common import AcceptedResponse
from lesson_rag.models.lesson import IndexState, LessonEvent, LessonTitle, ReindexAllResult
from lesson_rag.models.search import SearchRequest, SearchResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/lessons", tags=["lessons"])


@router.post("/index", response_model=ReindexAllResult)
async def reindex_all_lessons(
    lifecycle: IndexLifecycleManager = Depends(get_lifecycle_manager),
) -> ReindexAllResult:
    """
    Rebuild the index of every published lesson.

    Runs in the request; per-lesson failures are reported in the result
    rather than failing the call.
    """
    try:
        return await lifecycle.reindex_all()
    except LessonRagException as e:
        raise to_http_exception(e) from e


@router.post(
    "/{lesson_id}/events",
    response_model=AcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def lesson_event(
    lesson_id: str,
    event: LessonEvent,
    lifecycle: IndexLifecycleManager = Depends(get_lifecycle_manager),
) -> AcceptedResponse:
    """
    Receive a lesson mutation from the content system.

    Published/updated lessons are rebuilt in the background; unpublished
    and deleted lessons are purged before the response returns.
    """
    try:
        action = await lifecycle.handle_event(lesson_id, event)
    except LessonRagException as e:
        raise to_http_exception(e) from e

    logger.info(f"{__name__}:lesson_event - {event.event.value} -> {action}", extra={"lesson_id": lesson_id})
    return AcceptedResponse(lesson_id=lesson_id, action=action)


@router.get("/{lesson_id}/index", response_model=IndexState)
async def get_index_state(
    lesson_id: str,
    lifecycle: IndexLifecycleManager = Depends(get_lifecycle_manager),
) -> IndexState:
    """Report whether a lesson is unindexed, indexing or indexed."""
    return await lifecycle.get_state(lesson_id)


@router.get("/{lesson_id}/chunks/stats", response_model=ChunkStats)
async def get_chunk_stats(
    lesson_id: str,
    lifecycle: IndexLifecycleManager = Depends(get_lifecycle_manager),
) -> ChunkStats:
    """Chunk sizes of a lesson's active index, for debugging chunking."""
    return await lifecycle.get_chunk_stats(lesson_id)


@router.get("/{lesson_id}/title", response_model=LessonTitle)
async def get_lesson_title(
    lesson_id: str,
    search_service: SearchService = Depends(get_search_service),
) -> LessonTitle:
    """
    Look up a lesson's title.

    Raises:
        HTTPException(404): Lesson not found
    """
    title = await search_service.get_title(lesson_id)
    if title is None:
        raise HTTPException(status_code=404, detail=f"Lesson not found: {lesson_id}")
    return title


@router.post("/{lesson_id}/search", response_model=SearchResponse)
async def search_lesson(
    lesson_id: str,
    request: SearchRequest,
    search_service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """
    Rank a lesson's chunks against a query.

    Raises:
        HTTPException(400): Empty query
        HTTPException(404): Lesson not indexed
        HTTPException(500): Embedding provider failure
    """
    try:
        hits = await search_service.search(lesson_id, request.query, limit=request.limit)
    except LessonRagException as e:
        raise to_http_exception(e) from e
    return SearchResponse(results=hits)
