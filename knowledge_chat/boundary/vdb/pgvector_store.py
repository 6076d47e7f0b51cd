"""
pgvector chunk search.

Delegates similarity search to the database-side search_document_chunks
function, which ranks active, non-session chunks of one client by cosine
similarity against the stored vector column.

Dependencies: sqlalchemy, pgvector, knowledge_chat.boundary.vdb.vector_schemas
System role: Production similarity-search primitive (PostgreSQL + pgvector)
"""

import logging

from pgvector.sqlalchemy import Vector
from sqlalchemy import TextClause, bindparam, text
from sqlalchemy.exc import SQLAlchemyError

from knowledge_chat.boundary.vdb.base_store import ChunkSearch
from knowledge_chat.boundary.vdb.vector_schemas import ChunkMatch, ChunkQuery
from knowledge_chat.core.exceptions import VectorStoreError

logger = logging.getLogger(__name__)

_SEARCH_SQL = """
    SELECT content, title, similarity
    FROM search_document_chunks(
        query_embedding => :query_embedding,
        client_id_filter => :client_id_filter,
        similarity_threshold => :similarity_threshold,
        match_count => :match_count
    )
"""


def build_search_statement(dimension: int) -> TextClause:
    """Search statement with the query embedding bound as a pgvector value."""
    return text(_SEARCH_SQL).bindparams(
        bindparam("query_embedding", type_=Vector(dimension)),
    )


class PgVectorChunkSearch(ChunkSearch):
    """Chunk search backed by the search_document_chunks database function."""

    async def search(self, query: ChunkQuery) -> list[ChunkMatch]:
        """
        Run one thresholded similarity search.

        Args:
            query: Embedding, tenant scope, threshold and match count

        Returns:
            Matches ordered by descending similarity

        Raises:
            VectorStoreError: If the database call fails
        """
        params = {
            "query_embedding": query.embedding,
            "client_id_filter": query.client_id,
            "similarity_threshold": query.similarity_threshold,
            "match_count": query.match_count,
        }
        try:
            result = await self._db.execute(build_search_statement(len(query.embedding)), params)
            rows = result.mappings().all()
        except SQLAlchemyError as e:
            await self._reset_transaction()
            raise VectorStoreError(
                message="Failed to search document chunks",
                operation="search",
                details={"error": str(e), "threshold": query.similarity_threshold},
            ) from e

        logger.debug(
            f"{__name__}:search - threshold={query.similarity_threshold} matches={len(rows)}"
        )
        return [
            ChunkMatch(
                content=row["content"],
                title=row["title"] or "",
                similarity=float(row["similarity"] or 0.0),
            )
            for row in rows
        ]
