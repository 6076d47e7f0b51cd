"""
Chat session CRUD operations.

Provides session-specific queries on top of BaseCRUD: active-session lookup,
address scans for rate limiting, and atomic counter updates.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.models
System role: Session persistence operations
"""

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_chat.boundary.db.models.chat_session_model import ChatSessionModel


class ChatSessionCRUD(BaseCRUD[ChatSessionModel]):
    """CRUD operations for ChatSessionModel."""

    def __init__(self) -> None:
        """Initialize ChatSessionCRUD with ChatSessionModel."""
        super().__init__(ChatSessionModel)

    async def get_active_by_id(
        self,
        session: AsyncSession,
        id: UUID,
        now: datetime,
    ) -> ChatSessionModel | None:
        """
        Retrieve a session that has not expired yet.

        The expiry comparison runs in SQL so stored timestamps never need
        timezone normalization in Python.

        Args:
            session: Async database session
            id: Session UUID
            now: Reference time for expiry

        Returns:
            ChatSessionModel if found and unexpired, None otherwise
        """
        stmt = select(ChatSessionModel).where(
            ChatSessionModel.id == id,
            ChatSessionModel.expires_at > now,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_ids_for_address_since(
        self,
        session: AsyncSession,
        ip_address: str,
        since: datetime,
    ) -> list[UUID]:
        """
        List sessions created from an address inside a window.

        Args:
            session: Async database session
            ip_address: Source address
            since: Window start

        Returns:
            Session UUIDs, possibly empty
        """
        stmt = select(ChatSessionModel.id).where(
            ChatSessionModel.ip_address == ip_address,
            ChatSessionModel.created_at >= since,
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def record_user_message(
        self,
        session: AsyncSession,
        id: UUID,
        now: datetime,
    ) -> bool:
        """
        Bump message_count and last_message_at in one UPDATE statement.

        Args:
            session: Async database session
            id: Session UUID
            now: Message time

        Returns:
            True if the session row was updated
        """
        stmt = (
            update(ChatSessionModel)
            .where(ChatSessionModel.id == id)
            .values(
                message_count=ChatSessionModel.message_count + 1,
                last_message_at=now,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def mark_knowledge_gap(self, session: AsyncSession, id: UUID) -> bool:
        """
        Flag a session as having had at least one knowledge gap.

        Args:
            session: Async database session
            id: Session UUID

        Returns:
            True if the session row was updated
        """
        return await self.update_by_id(session, id, had_knowledge_gaps=True)


chat_session_crud = ChatSessionCRUD()
