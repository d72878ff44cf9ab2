"""
Test suite for ChatOrchestrator.

Covers turn validation, retrieval failures before generation, streaming,
cancellation and mid-stream failure.

System role: Verification of the grounded chat turn state machine
"""

import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models import GenericFakeChatModel
from langchain_core.messages import AIMessage, AIMessageChunk, SystemMessage

from lesson_rag.application.services import ChatOrchestrator, ChatTurn, IndexLifecycleManager, SearchService
from lesson_rag.boundary.providers import GenerationProvider
from lesson_rag.core.chunker import TextChunker
from lesson_rag.core.exceptions import NotFoundError, ProviderError, ValidationError
from lesson_rag.models.chat import ChatMessage, ChatRequest, TurnState

LESSON_CONTENT = "<p>Jesus loves children.</p><p>Compassion helps kids in Haiti.</p>"


class RecordingGenerationProvider:
    """Generation double that streams fixed tokens and records closing."""

    def __init__(self, tokens: list[str]) -> None:
        self.tokens = tokens
        self.calls: list[list] = []
        self.produced = 0
        self.closed = False

    async def stream(self, messages):
        self.calls.append(list(messages))
        try:
            for token in self.tokens:
                self.produced += 1
                yield token
        finally:
            self.closed = True


@pytest.fixture
def search_service(session_factory, chunk_index, embedding_provider) -> SearchService:
    """Provide search service over the test index."""
    return SearchService(session_factory, chunk_index, embedding_provider)


@pytest.fixture
async def indexed_lesson(session_factory, chunk_index, embedding_provider, add_lesson) -> str:
    """Provide id of an indexed lesson."""
    lifecycle = IndexLifecycleManager(
        session_factory=session_factory,
        chunk_index=chunk_index,
        embedding_provider=embedding_provider,
        chunker=TextChunker(chunk_size=5, chunk_overlap=1),
    )
    await add_lesson("lesson-1", title="Compassion", content=LESSON_CONTENT)
    await lifecycle.rebuild("lesson-1")
    return "lesson-1"


def make_request(lesson_id: str | None = "lesson-1", text: str = "What does compassion do?") -> ChatRequest:
    return ChatRequest(lesson_id=lesson_id, messages=[ChatMessage(role="user", content=text)])


class TestPrepareTurnValidation:
    """Test suite for turn validation."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_body",
        [
            ChatRequest(lesson_id=None, messages=[ChatMessage(role="user", content="hi")]),
            ChatRequest(lesson_id="lesson-1", messages=[]),
            ChatRequest(lesson_id="lesson-1", messages=[ChatMessage(role="assistant", content="hi")]),
            ChatRequest(lesson_id="lesson-1", messages=[ChatMessage(role="user", content="   ")]),
            ChatRequest(
                lesson_id="lesson-1",
                messages=[
                    ChatMessage(role="user", content="question"),
                    ChatMessage(role="assistant", content="answer"),
                ],
            ),
        ],
    )
    async def test_malformed_turn_should_raise_validation_error(
        self, search_service: SearchService, request_body: ChatRequest
    ) -> None:
        """Test turns without a trailing user question are rejected."""
        generation = MagicMock(spec=GenerationProvider)
        orchestrator = ChatOrchestrator(search_service, generation)

        with pytest.raises(ValidationError):
            await orchestrator.prepare_turn(request_body)

        generation.stream.assert_not_called()

    @pytest.mark.asyncio
    async def test_text_from_parts_should_be_accepted(self, search_service: SearchService, indexed_lesson: str) -> None:
        """Test a question sent as message parts is used."""
        orchestrator = ChatOrchestrator(search_service, MagicMock(spec=GenerationProvider))
        request = ChatRequest.model_validate({
            "lessonId": indexed_lesson,
            "messages": [{"role": "user", "parts": [{"type": "text", "text": "compassion?"}]}],
        })

        turn = await orchestrator.prepare_turn(request)

        assert turn.question == "compassion?"


class TestPrepareTurnRetrieval:
    """Test suite for retrieval before generation."""

    @pytest.mark.asyncio
    async def test_lesson_without_chunks_should_raise_not_found_before_generation(
        self, search_service: SearchService, add_lesson
    ) -> None:
        """Test an unindexed lesson never reaches the generation provider."""
        await add_lesson("lesson-1", title="Compassion", content=LESSON_CONTENT)
        generation = MagicMock(spec=GenerationProvider)
        orchestrator = ChatOrchestrator(search_service, generation)

        with pytest.raises(NotFoundError):
            await orchestrator.prepare_turn(make_request())

        generation.stream.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_lesson_should_raise_not_found(self, search_service: SearchService) -> None:
        """Test a lesson that does not exist is reported as such."""
        orchestrator = ChatOrchestrator(search_service, MagicMock(spec=GenerationProvider))

        with pytest.raises(NotFoundError) as exc_info:
            await orchestrator.prepare_turn(make_request(lesson_id="missing"))

        assert exc_info.value.resource == "lesson"

    @pytest.mark.asyncio
    async def test_embedding_failure_should_abort_before_generation(
        self, search_service: SearchService, indexed_lesson: str, keyword_embeddings
    ) -> None:
        """Test query embedding errors surface as ProviderError."""
        keyword_embeddings.aembed_query = AsyncMock(side_effect=TimeoutError("deadline"))
        generation = MagicMock(spec=GenerationProvider)
        orchestrator = ChatOrchestrator(search_service, generation)

        with pytest.raises(ProviderError):
            await orchestrator.prepare_turn(make_request())

        generation.stream.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_active_index_should_warn_and_assemble(
        self, search_service: SearchService, chunk_index, add_lesson, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a lesson indexed with no chunks proceeds with a logged warning."""
        await add_lesson("lesson-1", title="Blank", content="")
        version = await chunk_index.allocate_version("lesson-1")
        await chunk_index.replace_all("lesson-1", version, [])
        orchestrator = ChatOrchestrator(search_service, MagicMock(spec=GenerationProvider))

        with caplog.at_level(logging.WARNING, logger="lesson_rag.application.services.chat_orchestrator"):
            turn = await orchestrator.prepare_turn(make_request())

        assert turn.state == TurnState.CONTEXT_ASSEMBLED
        assert turn.hits == []
        assert any("empty context" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_prepare_turn_should_assemble_grounded_prompt(
        self, search_service: SearchService, indexed_lesson: str
    ) -> None:
        """Test the prompt carries title and best chunk first."""
        orchestrator = ChatOrchestrator(search_service, MagicMock(spec=GenerationProvider), top_k=2)

        turn = await orchestrator.prepare_turn(make_request())

        assert turn.state == TurnState.CONTEXT_ASSEMBLED
        assert len(turn.hits) == 2
        assert "compassion" in turn.hits[0].text.lower()
        system = turn.prompt[0]
        assert isinstance(system, SystemMessage)
        assert '"Compassion"' in system.content
        assert system.content.index(turn.hits[0].text) < system.content.index(turn.hits[1].text)
        assert turn.prompt[-1].content == "What does compassion do?"


class TestStreamAnswer:
    """Test suite for stream_answer()."""

    @pytest.mark.asyncio
    async def test_should_stream_model_tokens_and_complete(
        self, search_service: SearchService, indexed_lesson: str
    ) -> None:
        """Test tokens from the model reach the caller in order."""
        model = GenericFakeChatModel(messages=iter([AIMessage(content="Compassion helps kids in Haiti.")]))
        orchestrator = ChatOrchestrator(search_service, GenerationProvider(model))
        turn = await orchestrator.prepare_turn(make_request())

        tokens = [token async for token in orchestrator.stream_answer(turn)]

        assert "".join(tokens) == "Compassion helps kids in Haiti."
        assert turn.state == TurnState.COMPLETED

    @pytest.mark.asyncio
    async def test_cancel_should_stop_generation_promptly(
        self, search_service: SearchService, indexed_lesson: str
    ) -> None:
        """Test setting the cancel event stops pulling tokens and closes upstream."""
        generation = RecordingGenerationProvider([f"t{i} " for i in range(100)])
        orchestrator = ChatOrchestrator(search_service, generation)
        turn = await orchestrator.prepare_turn(make_request())
        cancel_event = asyncio.Event()
        received = []

        async for token in orchestrator.stream_answer(turn, cancel_event):
            received.append(token)
            if len(received) == 2:
                cancel_event.set()

        assert received == ["t0 ", "t1 "]
        assert generation.produced <= 3
        assert generation.closed is True
        assert turn.state == TurnState.CANCELLED

    @pytest.mark.asyncio
    async def test_cancel_before_start_should_not_call_model(
        self, search_service: SearchService, indexed_lesson: str
    ) -> None:
        """Test an already-cancelled turn never starts generation."""
        generation = RecordingGenerationProvider(["never"])
        orchestrator = ChatOrchestrator(search_service, generation)
        turn = await orchestrator.prepare_turn(make_request())
        cancel_event = asyncio.Event()
        cancel_event.set()

        received = [token async for token in orchestrator.stream_answer(turn, cancel_event)]

        assert received == []
        assert generation.calls == []
        assert turn.state == TurnState.CANCELLED

    @pytest.mark.asyncio
    async def test_consumer_closing_stream_should_close_upstream(
        self, search_service: SearchService, indexed_lesson: str
    ) -> None:
        """Test abandoning the stream also closes the model stream."""
        generation = RecordingGenerationProvider(["a", "b", "c"])
        orchestrator = ChatOrchestrator(search_service, generation)
        turn = await orchestrator.prepare_turn(make_request())

        stream = orchestrator.stream_answer(turn)
        assert await stream.__anext__() == "a"
        await stream.aclose()

        assert generation.closed is True
        assert turn.state == TurnState.CANCELLED

    @pytest.mark.asyncio
    async def test_mid_stream_failure_should_raise_provider_error(
        self, search_service: SearchService, indexed_lesson: str
    ) -> None:
        """Test a generation failure after some tokens surfaces as ProviderError."""

        async def astream(messages):
            yield AIMessageChunk(content="Partial ")
            raise ConnectionError("upstream reset")

        model = MagicMock()
        model.astream = astream
        orchestrator = ChatOrchestrator(search_service, GenerationProvider(model))
        turn = await orchestrator.prepare_turn(make_request())
        received = []

        with pytest.raises(ProviderError):
            async for token in orchestrator.stream_answer(turn):
                received.append(token)

        assert received == ["Partial "]
        assert turn.state == TurnState.FAILED

    @pytest.mark.asyncio
    async def test_unprepared_turn_should_be_rejected(self, search_service: SearchService) -> None:
        """Test streaming requires an assembled context."""
        generation = RecordingGenerationProvider(["x"])
        orchestrator = ChatOrchestrator(search_service, generation)

        with pytest.raises(ValidationError):
            async for _ in orchestrator.stream_answer(ChatTurn(lesson_id="lesson-1")):
                pass

        assert generation.calls == []
