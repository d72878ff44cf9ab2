"""
Configuration management module.

Environment-driven settings for the database, model providers and the
indexing pipeline, aggregated by Settings.
"""

from lesson_rag.configs.database import DatabaseSettings
from lesson_rag.configs.indexing import IndexingSettings
from lesson_rag.configs.providers import ProviderSettings
from lesson_rag.configs.settings import Settings, get_settings

__all__ = [
    "DatabaseSettings",
    "IndexingSettings",
    "ProviderSettings",
    "Settings",
    "get_settings",
]
