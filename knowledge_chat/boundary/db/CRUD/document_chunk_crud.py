"""
Document chunk read operations.

Chunks are only read by the chat endpoint: leading chunks for the overview
and fallback tiers, and embedded chunks for the scan similarity backend.
Both exclude inactive and session-scoped documents.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.models
System role: Knowledge base queries for retrieval
"""

from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_chat.boundary.db.models.document_model import DocumentChunkModel, DocumentModel


def _client_knowledge_base(client_id: UUID | None) -> Select:
    """
    Base query joining chunks to the client's active, shared documents.

    A missing client_id selects the shared knowledge base (documents with no client).
    """
    stmt = (
        select(DocumentChunkModel, DocumentModel.title)
        .join(DocumentModel, DocumentChunkModel.document_id == DocumentModel.id)
        .where(
            DocumentModel.is_active.is_(True),
            DocumentModel.session_id.is_(None),
        )
    )
    if client_id is None:
        return stmt.where(DocumentModel.client_id.is_(None))
    return stmt.where(DocumentModel.client_id == client_id)


class DocumentChunkCRUD(BaseCRUD[DocumentChunkModel]):
    """Read operations for DocumentChunkModel."""

    def __init__(self) -> None:
        """Initialize DocumentChunkCRUD with DocumentChunkModel."""
        super().__init__(DocumentChunkModel)

    async def get_leading_chunks(
        self,
        session: AsyncSession,
        client_id: UUID | None,
        limit: int,
    ) -> list[tuple[DocumentChunkModel, str]]:
        """
        Retrieve the first chunks of the client's knowledge base.

        Ordered by chunk index, ties broken by document age then id so the
        result is stable across calls.

        Args:
            session: Async database session
            client_id: Tenant scope (None for the shared knowledge base)
            limit: Maximum number of chunks

        Returns:
            (chunk, document title) pairs
        """
        stmt = (
            _client_knowledge_base(client_id)
            .order_by(
                DocumentChunkModel.chunk_index.asc(),
                DocumentModel.created_at.asc(),
                DocumentChunkModel.id.asc(),
            )
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(chunk, title) for chunk, title in result.all()]

    async def get_embedded_chunks(
        self,
        session: AsyncSession,
        client_id: UUID | None,
    ) -> list[tuple[DocumentChunkModel, str]]:
        """
        Retrieve every embedded chunk of the client's knowledge base in id order.

        Args:
            session: Async database session
            client_id: Tenant scope (None for the shared knowledge base)

        Returns:
            (chunk, document title) pairs
        """
        stmt = (
            _client_knowledge_base(client_id)
            .where(DocumentChunkModel.embedding.is_not(None))
            .order_by(DocumentChunkModel.id.asc())
        )
        result = await session.execute(stmt)
        return [(chunk, title) for chunk, title in result.all()]


document_chunk_crud = DocumentChunkCRUD()
