"""
Unified application settings.

Aggregates all configuration modules into a single Settings class.
Provides dependency injection factory for FastAPI.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from lesson_rag.configs.base import BaseSettings
from lesson_rag.configs.database import DatabaseSettings
from lesson_rag.configs.indexing import IndexingSettings
from lesson_rag.configs.providers import ProviderSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    # Aggregated settings
    database: DatabaseSettings = DatabaseSettings()
    providers: ProviderSettings = ProviderSettings()
    indexing: IndexingSettings = IndexingSettings()


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for dependency injection.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from lesson_rag.configs import get_settings
        settings = get_settings()
    """
    return Settings()
