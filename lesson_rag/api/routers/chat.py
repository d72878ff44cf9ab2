"""Chat API endpoints.

Routes:
- POST /chat - Answer a question about a lesson, streamed as plain text

Dependencies: lesson_rag.application.services.chat_orchestrator
System role: Grounded chat HTTP API with streaming support
"""

import asyncio
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from lesson_rag.api.deps import get_chat_orchestrator
from lesson_rag.api.routers.router_utils import to_http_exception
from lesson_rag.application.services.chat_orchestrator import ChatOrchestrator, ChatTurn
from lesson_rag.core.exceptions import LessonRagException
from lesson_rag.models.chat import ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])

STREAM_FAILURE_MESSAGE = "\n\nSorry, something went wrong while answering. Please try again."


@router.post("/chat")
async def chat(
    request: Request,
    body: ChatRequest,
    orchestrator: ChatOrchestrator = Depends(get_chat_orchestrator),
) -> StreamingResponse:
    """Stream a grounded answer to the last user message.

    Validation, lesson lookup and retrieval finish before the response
    starts, so their failures map to real status codes. Tokens then stream
    as text/plain.

    Args:
        request: Raw request, polled for client disconnect
        body: ChatRequest with messages and lessonId
        orchestrator: Injected ChatOrchestrator

    Returns:
        StreamingResponse: Incremental answer text

    Raises:
        HTTPException(400): Malformed conversation or missing lessonId
        HTTPException(404): Lesson not found or not indexed
        HTTPException(500): Embedding provider failure
    """
    logger.info(f"{__name__}:chat - START lesson_id={body.lesson_id}, messages={len(body.messages)}")

    try:
        turn = await orchestrator.prepare_turn(body)
    except LessonRagException as e:
        raise to_http_exception(e) from e

    return StreamingResponse(
        _answer_stream(request, orchestrator, turn),
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )


async def _answer_stream(
    request: Request,
    orchestrator: ChatOrchestrator,
    turn: ChatTurn,
) -> AsyncGenerator[str, None]:
    """Relay answer tokens, stopping generation when the client leaves."""
    cancel_event = asyncio.Event()
    tokens = orchestrator.stream_answer(turn, cancel_event)
    try:
        async for token in tokens:
            if await request.is_disconnected():
                logger.info(f"{__name__}:chat - Client disconnected, cancelling lesson_id={turn.lesson_id}")
                cancel_event.set()
                continue
            yield token
    except LessonRagException as e:
        logger.error(f"{__name__}:chat - Generation failed mid-stream: {type(e).__name__}: {e}")
        yield STREAM_FAILURE_MESSAGE
    finally:
        await tokens.aclose()

    logger.info(f"{__name__}:chat - Stream finished lesson_id={turn.lesson_id}, state={turn.state.value}")
