"""
Health check API endpoints.

Routes: GET /health, GET /health/db

Dependencies: lesson_rag.boundary
System role: Health check HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from lesson_rag.api.deps import get_session_factory

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    message: str


router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/db", response_model=HealthResponse)
async def health_check_db(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> HealthResponse:
    """Database health check."""
    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"{__name__}:health_check_db - {type(e).__name__}: {e}")
        raise HTTPException(status_code=503, detail="Database unavailable") from e
    return HealthResponse(status="healthy", message="Database connection OK")
