"""
Database configuration settings.

Manages the SQLAlchemy async connection URL for the lesson and chunk tables.
Pooling options apply to server databases only (PostgreSQL via asyncpg).

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from lesson_rag.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """Database configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DATABASE_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./lesson_rag.db",
        description="SQLAlchemy async database URL (postgresql+asyncpg://... in production)",
    )

    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=20, description="Maximum overflow connections")
    pool_timeout: int = Field(default=30, description="Connection pool timeout in seconds")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to logs")

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured URL targets SQLite (no server-side pooling)."""
        return self.url.startswith("sqlite")
