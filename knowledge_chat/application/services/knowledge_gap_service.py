"""
Knowledge gap tracker.

Records questions that retrieval could not answer confidently and lists
them for review. Repeated questions create separate records; there is no
deduplication against existing pending gaps.

Dependencies: knowledge_chat.boundary.db.CRUD
System role: Knowledge gap use case orchestration
"""

import logging
from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.CRUD.chat_session_crud import chat_session_crud
from knowledge_chat.boundary.db.CRUD.knowledge_gap_crud import knowledge_gap_crud
from knowledge_chat.boundary.db.models.knowledge_gap_model import GapStatus, KnowledgeGapModel
from knowledge_chat.observability.log_utils import safe_log_value

logger = logging.getLogger(__name__)


class KnowledgeGapService:
    """Knowledge gap service orchestrator."""

    def __init__(self, db: AsyncSession) -> None:
        """
        Initialize knowledge gap service with async database session.

        Args:
            db: Async SQLAlchemy session
        """
        self.db = db

    async def record_gap(
        self,
        client_id: UUID | None,
        session_id: UUID,
        question: str,
    ) -> KnowledgeGapModel:
        """
        Insert a pending gap and flag the session.

        Flushes only; the caller owns the commit.

        Args:
            client_id: Tenant whose knowledge base lacked the answer
            session_id: Session where the question was asked
            question: Literal question text

        Returns:
            Created KnowledgeGapModel
        """
        gap = await knowledge_gap_crud.create(
            self.db,
            client_id=client_id,
            session_id=session_id,
            user_question=question,
            status=GapStatus.PENDING,
        )
        await chat_session_crud.mark_knowledge_gap(self.db, session_id)
        logger.info(
            f"{__name__}:record_gap - Recorded gap {gap.id} for session {session_id}: "
            f"{safe_log_value(question, max_length=80)}"
        )
        return gap

    async def list_gaps(
        self,
        client_id: UUID,
        status: GapStatus | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> Sequence[KnowledgeGapModel]:
        """
        List a client's gaps, newest first.

        Args:
            client_id: Tenant UUID
            status: Optional status filter
            date_from: Optional inclusive lower bound on created_at
            date_to: Optional inclusive upper bound on created_at

        Returns:
            Matching gaps
        """
        return await knowledge_gap_crud.list_for_client(
            self.db,
            client_id,
            status=status,
            date_from=date_from,
            date_to=date_to,
        )
