"""
Chunk search factory for selecting between scan (dev) and pgvector (prod).

Depends on VECTOR_STORE_STORE_TYPE environment variable.
Provides consistent interface regardless of underlying implementation.

Dependencies: knowledge_chat.boundary.vdb, knowledge_chat.configs
System role: Similarity search instantiation and selection
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.vdb.base_store import ChunkSearch
from knowledge_chat.boundary.vdb.pgvector_store import PgVectorChunkSearch
from knowledge_chat.boundary.vdb.scan_store import ScanChunkSearch
from knowledge_chat.configs import get_settings

logger = logging.getLogger(__name__)


def get_chunk_search(db: AsyncSession, store_type: str | None = None) -> ChunkSearch:
    """
    Factory function to get a chunk search backend bound to a session.

    Args:
        db: Async database session the search runs in
        store_type: Override of the configured backend

    Returns:
        PgVectorChunkSearch or ScanChunkSearch: Configured search backend

    Raises:
        ValueError: If the store type is invalid
    """
    store_type = (store_type or get_settings().vector_store.store_type).lower()

    if store_type == "pgvector":
        return PgVectorChunkSearch(db)

    elif store_type == "scan":
        logger.debug(f"{__name__}:get_chunk_search - Using in-process scan search (local dev mode)")
        return ScanChunkSearch(db)

    else:
        raise ValueError(
            f"Invalid VECTOR_STORE_STORE_TYPE: {store_type}. "
            f"Must be 'scan' (dev) or 'pgvector' (production)."
        )
