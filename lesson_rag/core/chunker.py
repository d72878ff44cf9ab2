"""
Word-window chunker.

Splits normalized text into overlapping windows of whitespace-separated
words. Word counts stand in for token counts, which keeps the chunker
tokenizer-free and reproducible.

Dependencies: lesson_rag.core.exceptions
System role: Second stage of lesson indexing
"""

from lesson_rag.core.exceptions import ValidationError

DEFAULT_CHUNK_SIZE = 250
DEFAULT_CHUNK_OVERLAP = 25


class TextChunker:
    """Split text into ordered, overlapping word windows."""

    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
    ) -> None:
        """
        Initialize chunker with window configuration.

        Args:
            chunk_size: Words per chunk
            chunk_overlap: Words repeated at the start of the next chunk

        Raises:
            ValidationError: When the window cannot advance
        """
        if chunk_size <= 0:
            raise ValidationError("chunk_size must be positive", field="chunk_size")
        if chunk_overlap < 0:
            raise ValidationError("chunk_overlap cannot be negative", field="chunk_overlap")
        if chunk_overlap >= chunk_size:
            raise ValidationError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})",
                field="chunk_overlap",
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    @property
    def step(self) -> int:
        """Distance in words between consecutive chunk starts."""
        return self.chunk_size - self.chunk_overlap

    def chunk(self, text: str) -> list[str]:
        """
        Split text into chunks.

        Args:
            text: Plain text (normally the normalizer's output)

        Returns:
            list[str]: Chunks in document order; empty for blank input
        """
        words = text.split()
        chunks: list[str] = []

        for start in range(0, len(words), self.step):
            end = start + self.chunk_size
            chunk = " ".join(words[start:end]).strip()
            if chunk:
                chunks.append(chunk)
            # The window that reaches the last word is the final one
            if end >= len(words):
                break

        return chunks
