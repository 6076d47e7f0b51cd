"""
In-process chunk search.

Loads the client's embedded chunks and scores them with numpy cosine similarity
in process. Intended for local development and SQLite test databases where
pgvector is unavailable; cost grows linearly with the knowledge base.

Dependencies: sqlalchemy, knowledge_chat.boundary.db, knowledge_chat.core.similarity
System role: Development similarity-search primitive
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from knowledge_chat.boundary.db.CRUD.document_chunk_crud import document_chunk_crud
from knowledge_chat.boundary.vdb.base_store import ChunkSearch
from knowledge_chat.boundary.vdb.vector_schemas import ChunkMatch, ChunkQuery
from knowledge_chat.core.exceptions import VectorStoreError
from knowledge_chat.core.similarity import cosine_similarity

logger = logging.getLogger(__name__)


class ScanChunkSearch(ChunkSearch):
    """Chunk search that scores every stored embedding in process."""

    async def search(self, query: ChunkQuery) -> list[ChunkMatch]:
        """
        Run one thresholded similarity search.

        Chunks whose stored embedding has a different dimension than the
        query are skipped with a warning. Equal scores keep chunk id order.

        Args:
            query: Embedding, tenant scope, threshold and match count

        Returns:
            Matches ordered by descending similarity

        Raises:
            VectorStoreError: If loading chunks fails
        """
        try:
            rows = await document_chunk_crud.get_embedded_chunks(self._db, query.client_id)
        except SQLAlchemyError as e:
            await self._reset_transaction()
            raise VectorStoreError(
                message="Failed to load document chunks",
                operation="search",
                details={"error": str(e)},
            ) from e

        dimension = len(query.embedding)
        scored: list[ChunkMatch] = []
        for chunk, title in rows:
            stored_dimension = 0 if chunk.embedding is None else len(chunk.embedding)
            if stored_dimension != dimension:
                logger.warning(
                    f"{__name__}:search - Skipping chunk {chunk.id} with "
                    f"dimension {stored_dimension}"
                )
                continue
            similarity = cosine_similarity(query.embedding, chunk.embedding)
            if similarity >= query.similarity_threshold:
                scored.append(ChunkMatch(content=chunk.content, title=title, similarity=similarity))

        scored.sort(key=lambda match: match.similarity, reverse=True)
        return scored[: query.match_count]
