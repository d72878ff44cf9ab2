"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers, middleware and domain error
handlers, and configures the uvicorn server.

Dependencies: fastapi, lesson_rag.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lesson_rag.api.deps.dependencies import get_service_cache
from lesson_rag.api.routers.router_utils.error_mapping import public_message, status_code_for
from lesson_rag.boundary.db.connection import create_all_tables
from lesson_rag.configs import get_settings
from lesson_rag.core.exceptions import LessonRagException
from lesson_rag.models.common import ErrorResponse
from lesson_rag.observability.logger import configure_logging
from lesson_rag.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

from .routers import chat_router, health_router, lessons_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    # Startup
    cache = get_service_cache()
    await create_all_tables(cache.engine)
    logger.info(f"{__name__}:lifespan - Database schema ready, environment={settings.environment}")

    yield

    # Shutdown
    await cache.close()
    logger.info(f"{__name__}:lifespan - Service cache closed")


async def lesson_rag_exception_handler(request: Request, exc: LessonRagException) -> JSONResponse:
    """Translate domain errors that escaped a router into JSON responses."""
    status_code = status_code_for(exc)
    if status_code == 500:
        logger.error(f"{__name__}:exception_handler - {request.method} {request.url.path}: {exc}")
    body = ErrorResponse(error=public_message(exc), details=None if status_code == 500 else exc.details)
    return JSONResponse(status_code=status_code, content=body.model_dump())


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies and parameters as 400."""
    errors = jsonable_encoder(exc.errors())
    logger.info(f"{__name__}:exception_handler - {request.method} {request.url.path}: {len(errors)} invalid fields")
    body = ErrorResponse(error="Malformed request", details={"errors": errors})
    return JSONResponse(status_code=400, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain and request-validation error handlers on an app."""
    app.add_exception_handler(LessonRagException, lesson_rag_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Lesson RAG API",
        description="Lesson retrieval and grounded chat",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(chat_router, prefix="/api/v1")
    app.include_router(lessons_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "lesson_rag.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
