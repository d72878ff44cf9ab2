"""
Model provider configuration settings.

Credentials, endpoint and model identifiers for the embedding and
answer-generation services (Google Generative AI via LangChain).

Dependencies: pydantic, pydantic_settings
System role: External model provider configuration
"""

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import SettingsConfigDict

from lesson_rag.configs.base import BaseSettings


class ProviderSettings(BaseSettings):
    """Embedding and generation provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PROVIDER_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    google_api_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("PROVIDER_GOOGLE_API_KEY", "GOOGLE_API_KEY"),
        description="API key for Google Generative AI (embeddings and chat)",
    )
    api_endpoint: str | None = Field(
        default=None,
        description="Optional API endpoint override for both clients",
    )

    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Embedding model identifier",
    )
    embedding_dimension: int | None = Field(
        default=None,
        gt=0,
        description="Expected embedding length; vectors of any other length are rejected",
    )

    chat_model: str = Field(
        default="gemini-2.5-flash",
        description="Answer-generation model identifier",
    )
    chat_temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for answer generation",
    )
