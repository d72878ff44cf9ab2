"""
Indexing and retrieval configuration settings.

Chunking window, overlap, and default top-K for lesson retrieval.

Dependencies: pydantic, pydantic_settings
System role: Retrieval pipeline tuning
"""

from pydantic import Field, model_validator
from pydantic_settings import SettingsConfigDict

from lesson_rag.configs.base import BaseSettings


class IndexingSettings(BaseSettings):
    """Chunking and retrieval configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="INDEXING_",
        case_sensitive=False,
        extra="ignore",
    )

    # 250 words with 10% overlap keeps chunks small enough for chatbot grounding
    chunk_size: int = Field(default=250, gt=0, description="Chunk length in words")
    chunk_overlap: int = Field(default=25, ge=0, description="Words shared by consecutive chunks")

    top_k: int = Field(default=5, gt=0, description="Default number of chunks returned by search")
    max_concurrent_rebuilds: int = Field(
        default=4,
        gt=0,
        description="Upper bound on background rebuilds running at once",
    )

    @model_validator(mode="after")
    def _check_overlap(self) -> "IndexingSettings":
        if self.chunk_overlap >= self.chunk_size:
            raise ValueError(
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than chunk_size ({self.chunk_size})"
            )
        return self
