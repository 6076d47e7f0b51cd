"""
Knowledge gap CRUD operations.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.models
System role: Knowledge gap persistence and review queries
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_chat.boundary.db.models.knowledge_gap_model import GapStatus, KnowledgeGapModel


class KnowledgeGapCRUD(BaseCRUD[KnowledgeGapModel]):
    """CRUD operations for KnowledgeGapModel."""

    def __init__(self) -> None:
        """Initialize KnowledgeGapCRUD with KnowledgeGapModel."""
        super().__init__(KnowledgeGapModel)

    async def list_for_client(
        self,
        session: AsyncSession,
        client_id: UUID,
        status: GapStatus | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> Sequence[KnowledgeGapModel]:
        """
        List a client's gaps, newest first, with optional filters.

        Args:
            session: Async database session
            client_id: Tenant UUID
            status: Only gaps in this status
            date_from: Inclusive lower bound on created_at
            date_to: Inclusive upper bound on created_at

        Returns:
            Matching KnowledgeGapModels
        """
        stmt = select(KnowledgeGapModel).where(KnowledgeGapModel.client_id == client_id)
        if status is not None:
            stmt = stmt.where(KnowledgeGapModel.status == status)
        if date_from is not None:
            stmt = stmt.where(KnowledgeGapModel.created_at >= date_from)
        if date_to is not None:
            stmt = stmt.where(KnowledgeGapModel.created_at <= date_to)
        stmt = stmt.order_by(KnowledgeGapModel.created_at.desc())
        result = await session.execute(stmt)
        return result.scalars().all()


knowledge_gap_crud = KnowledgeGapCRUD()
