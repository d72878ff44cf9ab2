"""
Database connection management.

Provides the async SQLAlchemy engine, session factory, and schema creation.

Dependencies: sqlalchemy, lesson_rag.configs
System role: Database connection lifecycle management
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from lesson_rag.boundary.db.base import Base
from lesson_rag.configs import get_settings
from lesson_rag.configs.database import DatabaseSettings


def get_async_engine(db_config: DatabaseSettings | None = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine.

    Server databases get a bounded connection pool with pre-ping to detect
    stale connections early; SQLite uses the driver's default pool.

    Args:
        db_config: Database settings (defaults to application settings)

    Returns:
        AsyncEngine: Configured async SQLAlchemy engine

    Usage:
        engine = get_async_engine()
        async with engine.connect() as conn:
            result = await conn.execute(text("SELECT 1"))
    """
    db_config = db_config or get_settings().database

    if db_config.is_sqlite:
        return create_async_engine(db_config.url, echo=db_config.echo_sql)

    return create_async_engine(
        db_config.url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker[AsyncSession]:
    """
    Create async session factory for database operations.

    Sessions use autoflush=False and expire_on_commit=False for explicit
    transaction control and detached reads after commit.

    Args:
        engine: Engine to bind (a new one from settings if None)

    Returns:
        async_sessionmaker: Async session factory

    Usage:
        SessionFactory = get_async_session_factory()
        async with SessionFactory() as session:
            session.add(obj)
            await session.commit()
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        autoflush=False,
        expire_on_commit=False,
    )


async def create_all_tables(engine: AsyncEngine) -> None:
    """
    Create all tables registered on Base.metadata.

    Idempotent: existing tables are left unchanged.

    Args:
        engine: Target engine
    """
    # Register models with the metadata before create_all
    from lesson_rag.boundary.db import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
