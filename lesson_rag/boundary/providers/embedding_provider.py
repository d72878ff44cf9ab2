"""
Embedding provider adapter.

Wraps a LangChain Embeddings implementation behind a single async
embed(text) call. Provider failures surface as ProviderError; vectors of the
wrong length surface as DimensionMismatchError so they never reach the index.

The Google client is built on the first embed call, so a missing API key
only fails the requests that actually need embeddings.

Dependencies: langchain_core, langchain_google_genai
System role: Text-to-vector conversion for indexing and search
"""

import logging
from collections.abc import Callable
from functools import partial

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from lesson_rag.configs.providers import ProviderSettings
from lesson_rag.core.exceptions import DimensionMismatchError, ProviderError

logger = logging.getLogger(__name__)


class EmbeddingProvider:
    """
    Async embedding adapter over a LangChain Embeddings model.

    The same call embeds chunk text at index time and query text at search
    time, so both land in one vector space.
    """

    def __init__(
        self,
        embeddings: Embeddings | None = None,
        expected_dimension: int | None = None,
        embeddings_factory: Callable[[], Embeddings] | None = None,
    ) -> None:
        """
        Initialize adapter.

        Args:
            embeddings: LangChain embeddings model
            expected_dimension: Reject vectors of any other length when set
            embeddings_factory: Builds the model on first use when embeddings is None

        Raises:
            ValueError: Neither embeddings nor embeddings_factory given
        """
        if embeddings is None and embeddings_factory is None:
            raise ValueError("EmbeddingProvider needs embeddings or embeddings_factory")
        self._embeddings = embeddings
        self._embeddings_factory = embeddings_factory
        self.expected_dimension = expected_dimension

    def _client(self) -> Embeddings:
        if self._embeddings is None:
            self._embeddings = self._embeddings_factory()
        return self._embeddings

    async def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Args:
            text: Non-empty text

        Returns:
            list[float]: Embedding vector

        Raises:
            ProviderError: Provider not configured, call failed, or empty vector
            DimensionMismatchError: Vector length differs from expected_dimension
        """
        embeddings = self._client()
        try:
            vector = await embeddings.aembed_query(text)
        except Exception as e:
            logger.error(
                f"{__name__}:embed - Provider call failed: {type(e).__name__}: {e}",
                extra={"text_length": len(text)},
            )
            raise ProviderError(
                message="Embedding request failed",
                provider="embedding",
                details={"error": str(e)},
            ) from e

        if not vector:
            raise ProviderError(message="Embedding provider returned an empty vector", provider="embedding")

        if self.expected_dimension is not None and len(vector) != self.expected_dimension:
            raise DimensionMismatchError(expected=self.expected_dimension, actual=len(vector))

        return [float(value) for value in vector]


def _build_google_embeddings(settings: ProviderSettings) -> Embeddings:
    if settings.google_api_key is None:
        logger.error(f"{__name__}:embed - No API key configured")
        raise ProviderError(
            message="Embedding provider credentials are not configured",
            provider="embedding",
        )

    kwargs = {}
    if settings.api_endpoint:
        kwargs["client_options"] = {"api_endpoint": settings.api_endpoint}

    embeddings = GoogleGenerativeAIEmbeddings(
        model=settings.embedding_model,
        google_api_key=settings.google_api_key,
        **kwargs,
    )
    logger.info(
        f"{__name__}:embed - Client initialized",
        extra={"model": settings.embedding_model, "dimension": settings.embedding_dimension},
    )
    return embeddings


def create_embedding_provider(settings: ProviderSettings) -> EmbeddingProvider:
    """
    Build the Google Generative AI embedding provider from settings.

    Never raises: credentials are checked on the first embed call, which
    raises ProviderError when no API key is configured.
    """
    return EmbeddingProvider(
        expected_dimension=settings.embedding_dimension,
        embeddings_factory=partial(_build_google_embeddings, settings),
    )
