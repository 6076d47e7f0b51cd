"""
Dependency injection container.

Factory functions for FastAPI dependencies. Model clients are expensive to
build and safe to share, so they live in a process-wide cache; services are
built per request around the request's database session.

Dependencies: knowledge_chat.configs, knowledge_chat.application, knowledge_chat.boundary
System role: DI container for service injection
"""

import hmac
from functools import lru_cache

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.application.services import ChatService, KnowledgeGapService
from knowledge_chat.boundary.db import get_async_db
from knowledge_chat.boundary.llm import CompletionClient, QueryEmbedder
from knowledge_chat.configs import Settings, get_settings
from knowledge_chat.core.exceptions import AdminAccessError


class ServiceCache:
    """Container for cached model clients."""

    def __init__(self):
        self._embedder = None
        self._completion_client = None

    @property
    def embedder(self) -> QueryEmbedder:
        """Get cached query embedder."""
        if self._embedder is None:
            config = get_settings().vector_store
            self._embedder = QueryEmbedder(
                model=config.embedding_model,
                dimension=config.embedding_dimension,
                timeout_seconds=config.embedding_timeout_seconds,
            )
        return self._embedder

    @property
    def completion_client(self) -> CompletionClient:
        """Get cached completion client."""
        if self._completion_client is None:
            self._completion_client = CompletionClient(get_settings().llm)
        return self._completion_client

    def clear(self) -> None:
        """Clear all cached instances."""
        self._embedder = None
        self._completion_client = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_chat_service(
    db: AsyncSession = Depends(get_async_db),
    settings: Settings = Depends(get_settings_dependency),
) -> ChatService:
    """
    Get chat service instance.

    Uses the search backend selected via VECTOR_STORE_STORE_TYPE (scan for dev, pgvector for prod).

    Args:
        db: Async database session (injected via Depends)
        settings: Application settings (injected via Depends)

    Returns:
        ChatService: Completion orchestrator bound to this request
    """
    cache = get_service_cache()
    return ChatService(
        db=db,
        settings=settings.chat,
        embedder=cache.embedder,
        completion_client=cache.completion_client,
    )


def get_knowledge_gap_service(db: AsyncSession = Depends(get_async_db)) -> KnowledgeGapService:
    """
    Get knowledge gap service instance.

    Args:
        db: Async database session (injected via Depends)

    Returns:
        KnowledgeGapService: Knowledge gap service instance
    """
    return KnowledgeGapService(db=db)


def require_admin_key(
    x_admin_key: str | None = Header(default=None, alias="X-Admin-Key"),
    settings: Settings = Depends(get_settings_dependency),
) -> None:
    """
    Guard for admin endpoints.

    Raises:
        AdminAccessError: If no admin key is configured or the header does not match it
    """
    expected = settings.chat.admin_api_key
    if not expected:
        raise AdminAccessError("Admin endpoints are disabled: no admin key configured")
    if not x_admin_key or not hmac.compare_digest(x_admin_key.encode(), expected.encode()):
        raise AdminAccessError("Invalid admin key")
