"""
Answer-generation provider adapter.

Wraps a LangChain chat model and exposes its output as a lazy stream of text
tokens. Closing the returned iterator closes the upstream model stream.
The Google client is built when the first answer is streamed.

Dependencies: langchain_core, langchain_google_genai
System role: Streaming answer generation
"""

import logging
from collections.abc import AsyncIterator, Callable, Sequence
from functools import partial

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import BaseMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from lesson_rag.configs.providers import ProviderSettings
from lesson_rag.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


def _token_text(content: str | list) -> str:
    # Some providers stream content as a list of blocks
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return str(content)


class GenerationProvider:
    """Streaming adapter over a LangChain chat model."""

    def __init__(
        self,
        model: BaseChatModel | None = None,
        model_factory: Callable[[], BaseChatModel] | None = None,
    ) -> None:
        if model is None and model_factory is None:
            raise ValueError("GenerationProvider needs model or model_factory")
        self._model = model
        self._model_factory = model_factory

    def _client(self) -> BaseChatModel:
        if self._model is None:
            self._model = self._model_factory()
        return self._model

    async def stream(self, messages: Sequence[BaseMessage]) -> AsyncIterator[str]:
        """
        Stream answer tokens for a prepared message list.

        Args:
            messages: System instructions followed by the conversation

        Yields:
            str: Non-empty text tokens in generation order

        Raises:
            ProviderError: Provider not configured, or model call failed
                before or during streaming
        """
        upstream = self._client().astream(list(messages))
        token_count = 0
        try:
            async for chunk in upstream:
                if not chunk.content:
                    continue
                token = _token_text(chunk.content)
                if token:
                    token_count += 1
                    yield token
        except Exception as e:
            logger.error(
                f"{__name__}:stream - Model stream failed after {token_count} tokens: {type(e).__name__}: {e}"
            )
            raise ProviderError(
                message="Answer generation failed",
                provider="generation",
                details={"error": str(e)},
            ) from e
        finally:
            await upstream.aclose()

        logger.info(f"{__name__}:stream - Completed", extra={"token_count": token_count})


def _build_google_chat_model(settings: ProviderSettings) -> BaseChatModel:
    if settings.google_api_key is None:
        logger.error(f"{__name__}:stream - No API key configured")
        raise ProviderError(
            message="Generation provider credentials are not configured",
            provider="generation",
        )

    kwargs = {}
    if settings.api_endpoint:
        kwargs["client_options"] = {"api_endpoint": settings.api_endpoint}

    model = ChatGoogleGenerativeAI(
        model=settings.chat_model,
        temperature=settings.chat_temperature,
        google_api_key=settings.google_api_key,
        **kwargs,
    )
    logger.info(f"{__name__}:stream - Client initialized", extra={"model": settings.chat_model})
    return model


def create_generation_provider(settings: ProviderSettings) -> GenerationProvider:
    """
    Build the Google Generative AI chat provider from settings.

    Never raises: credentials are checked when the first answer is streamed.
    """
    return GenerationProvider(model_factory=partial(_build_google_chat_model, settings))
