"""
Vectorize every published lesson.

Rebuilds the chunk index of each published lesson one after another and
prints a summary. Exits with status 1 if the run itself fails.
Run: python -m lesson_rag.scripts.vectorize_lessons

Dependencies: lesson_rag.api.deps, lesson_rag.boundary.db
"""

import asyncio
import logging
import sys

from lesson_rag.api.deps.dependencies import ServiceCache
from lesson_rag.boundary.db.connection import create_all_tables
from lesson_rag.configs import get_settings
from lesson_rag.models.lesson import ReindexAllResult
from lesson_rag.observability.logger import configure_logging

logger = logging.getLogger(__name__)


async def vectorize_all() -> ReindexAllResult:
    """Rebuild every published lesson's index."""
    cache = ServiceCache(get_settings())
    try:
        await create_all_tables(cache.engine)
        return await cache.lifecycle.reindex_all()
    finally:
        await cache.close()


def main():
    """CLI entry point."""
    configure_logging(get_settings().log_level)
    print("Starting lesson vectorization...")

    try:
        result = asyncio.run(vectorize_all())
    except Exception as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    print("Vectorization complete:")
    print(f"  Processed: {result.processed} lessons")
    print(f"  Errors: {len(result.errors)}")
    for error in result.errors:
        print(f"    - {error}")


if __name__ == "__main__":
    main()
