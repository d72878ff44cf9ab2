"""
Retrieval-grounded chat orchestrator.

Runs one chat turn: validates the conversation, retrieves the lesson's most
relevant chunks, assembles the grounding prompt, then streams the answer.

Turn states: RECEIVED -> RETRIEVING -> CONTEXT_ASSEMBLED -> GENERATING ->
COMPLETED | FAILED | CANCELLED

Retrieval happens entirely in prepare_turn, so every retrieval failure is
raised before the generation model is called. Nothing is persisted.

Dependencies: lesson_rag.application.services.search_service,
    lesson_rag.boundary.providers, lesson_rag.core.grounding
System role: Chat turn orchestration
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from langchain_core.messages import BaseMessage

from lesson_rag.application.services.search_service import SearchService
from lesson_rag.boundary.providers.generation_provider import GenerationProvider
from lesson_rag.core.exceptions import LessonRagException, NotFoundError, ValidationError
from lesson_rag.core.grounding import build_grounded_messages
from lesson_rag.core.similarity import DEFAULT_LIMIT
from lesson_rag.models.chat import ChatRequest, TurnState
from lesson_rag.models.chunk import SearchHit

logger = logging.getLogger(__name__)


@dataclass
class ChatTurn:
    """Transient state of a single chat turn."""

    lesson_id: str
    question: str = ""
    lesson_title: str = ""
    hits: list[SearchHit] = field(default_factory=list)
    prompt: list[BaseMessage] = field(default_factory=list)
    state: TurnState = TurnState.RECEIVED
    token_count: int = 0

    def transition(self, state: TurnState) -> None:
        logger.info(
            f"{__name__}:transition - {self.state.value} -> {state.value}",
            extra={"lesson_id": self.lesson_id, "token_count": self.token_count},
        )
        self.state = state


class ChatOrchestrator:
    """
    Combines lesson retrieval with a streaming answer-generation call.

    Usage:
        turn = await orchestrator.prepare_turn(request)
        async for token in orchestrator.stream_answer(turn, cancel_event):
            ...
    """

    def __init__(
        self,
        search_service: SearchService,
        generation_provider: GenerationProvider,
        top_k: int = DEFAULT_LIMIT,
    ) -> None:
        """
        Initialize orchestrator.

        Args:
            search_service: Lesson title lookup and similarity search
            generation_provider: Streaming chat model adapter
            top_k: Number of chunks placed in the grounding context
        """
        self._search_service = search_service
        self._generation_provider = generation_provider
        self.top_k = top_k

    async def prepare_turn(self, request: ChatRequest) -> ChatTurn:
        """
        Validate a turn and assemble its grounded prompt.

        Args:
            request: Conversation and target lesson

        Returns:
            ChatTurn: Turn in CONTEXT_ASSEMBLED state

        Raises:
            ValidationError: Missing lesson id or no trailing user question
            NotFoundError: Lesson unknown or not indexed
            ProviderError: Query embedding failed
        """
        if not request.lesson_id:
            raise ValidationError("lessonId is required", field="lesson_id")

        turn = ChatTurn(lesson_id=request.lesson_id)

        if not request.messages:
            raise ValidationError("messages must not be empty", field="messages")
        last = request.messages[-1]
        if last.role != "user" or not last.text.strip():
            raise ValidationError("The last message must be a non-empty user message", field="messages")
        turn.question = last.text.strip()

        turn.transition(TurnState.RETRIEVING)
        try:
            title = await self._search_service.get_title(turn.lesson_id)
            if title is None:
                raise NotFoundError("lesson", turn.lesson_id)
            turn.lesson_title = title.title
            turn.hits = await self._search_service.search(turn.lesson_id, turn.question, limit=self.top_k)
        except LessonRagException as e:
            logger.warning(
                f"{__name__}:prepare_turn - Retrieval failed: {type(e).__name__}: {e.message}",
                extra={"lesson_id": turn.lesson_id},
            )
            turn.transition(TurnState.FAILED)
            raise

        if not turn.hits:
            logger.warning(
                f"{__name__}:prepare_turn - Active index has no chunks; answering with an empty context",
                extra={"lesson_id": turn.lesson_id},
            )

        turn.prompt = build_grounded_messages(turn.lesson_title, turn.hits, request.messages)
        turn.transition(TurnState.CONTEXT_ASSEMBLED)
        logger.info(
            f"{__name__}:prepare_turn - Context assembled",
            extra={
                "lesson_id": turn.lesson_id,
                "hit_count": len(turn.hits),
                "chunk_indexes": [hit.chunk_index for hit in turn.hits],
            },
        )
        return turn

    async def stream_answer(
        self,
        turn: ChatTurn,
        cancel_event: asyncio.Event | None = None,
    ) -> AsyncIterator[str]:
        """
        Stream the grounded answer for a prepared turn.

        Stops pulling from the model as soon as cancel_event is set, and
        closes the upstream stream so no further tokens are generated.

        Args:
            turn: Turn returned by prepare_turn
            cancel_event: Set by the caller when the client goes away

        Yields:
            str: Answer tokens

        Raises:
            ProviderError: Generation failed mid-stream (no retry)
        """
        if turn.state != TurnState.CONTEXT_ASSEMBLED:
            raise ValidationError(f"Turn is not ready for generation (state={turn.state.value})")

        if cancel_event is not None and cancel_event.is_set():
            turn.transition(TurnState.CANCELLED)
            return

        turn.transition(TurnState.GENERATING)
        tokens = self._generation_provider.stream(turn.prompt)
        try:
            async for token in tokens:
                if cancel_event is not None and cancel_event.is_set():
                    turn.transition(TurnState.CANCELLED)
                    return
                turn.token_count += 1
                yield token
        except LessonRagException:
            turn.transition(TurnState.FAILED)
            raise
        except (asyncio.CancelledError, GeneratorExit):
            turn.transition(TurnState.CANCELLED)
            raise
        finally:
            await tokens.aclose()

        turn.transition(TurnState.COMPLETED)
