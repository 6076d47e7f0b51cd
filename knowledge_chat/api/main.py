"""
FastAPI application with assembled routers.

Initializes FastAPI app with all API routers and configures uvicorn server.

Dependencies: fastapi, knowledge_chat.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from knowledge_chat.api import api_router
from knowledge_chat.api.deps.dependencies import get_service_cache
from knowledge_chat.api.errors import register_exception_handlers
from knowledge_chat.boundary.db.connection import get_async_engine
from knowledge_chat.configs import get_settings
from knowledge_chat.observability.logger import configure_logging
from knowledge_chat.observability.middleware import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    # Startup
    logger.info(f"{__name__}:lifespan - Pre-warming service cache...")
    cache = get_service_cache()
    # Trigger property access to load instances
    _ = cache.embedder
    _ = cache.completion_client
    logger.info(f"{__name__}:lifespan - Service cache pre-warmed")

    yield

    # Shutdown
    cache.clear()
    await get_async_engine().dispose()
    logger.info(f"{__name__}:lifespan - Service cache cleared, database pool closed")


def create_app() -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    app = FastAPI(
        title="Knowledge Chat API",
        description="Retrieval-augmented chat over a client's private knowledge base",
        version="0.1.0",
        lifespan=lifespan,
    )

    # The widget is embedded on client sites
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware (last added runs first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    # Register all routers with /api/v1 prefix for versioning
    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "knowledge_chat.api.main:app",
        host="0.0.0.0",
        port=8000,
    )
