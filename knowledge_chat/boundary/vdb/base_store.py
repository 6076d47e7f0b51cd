"""
Shared base for chunk search backends.

Besides the backend-specific similarity search, every backend can list the
leading chunks of a client's knowledge base, used by the overview and raw
fallback retrieval tiers.

Dependencies: sqlalchemy, knowledge_chat.boundary.db
System role: Common chunk search contract
"""

import logging
from abc import ABC, abstractmethod
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.CRUD.document_chunk_crud import document_chunk_crud
from knowledge_chat.boundary.vdb.vector_schemas import ChunkMatch, ChunkQuery
from knowledge_chat.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)


class ChunkSearch(ABC):
    """Base class for similarity search over stored chunk embeddings."""

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    @abstractmethod
    async def search(self, query: ChunkQuery) -> list[ChunkMatch]:
        """
        Run one thresholded similarity search.

        Args:
            query: Embedding, tenant scope, threshold and match count

        Returns:
            Matches ordered by descending similarity

        Raises:
            VectorStoreError: If the backend fails
        """

    async def leading_chunks(self, client_id: UUID | None, limit: int) -> list[ChunkMatch]:
        """
        First chunks of the client's active, non-session documents by chunk index.

        Args:
            client_id: Tenant scope (None for the shared knowledge base)
            limit: Maximum number of chunks

        Returns:
            Unscored matches

        Raises:
            VectorStoreError: If the lookup fails
        """
        try:
            rows = await document_chunk_crud.get_leading_chunks(self._db, client_id, limit)
        except SQLAlchemyError as e:
            await self._reset_transaction()
            raise VectorStoreError(
                message="Failed to load leading chunks",
                operation="fallback",
                details={"error": str(e)},
            ) from e
        return [ChunkMatch(content=chunk.content, title=title) for chunk, title in rows]

    async def _reset_transaction(self) -> None:
        """Roll back a failed statement so later queries on the session still run."""
        try:
            await self._db.rollback()
        except SQLAlchemyError as e:
            logger.warning(f"{__name__}:_reset_transaction - Rollback failed: {e}")
