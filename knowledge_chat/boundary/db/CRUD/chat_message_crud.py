"""
Chat message CRUD operations.

Session-scoped transcript persistence and the message counts used by the
per-address rate limit.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.models
System role: Chat message persistence
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_chat.boundary.db.models.chat_message_model import ChatMessageModel, MessageRole


class ChatMessageCRUD(BaseCRUD[ChatMessageModel]):
    """CRUD operations for ChatMessageModel."""

    def __init__(self) -> None:
        """Initialize ChatMessageCRUD with ChatMessageModel."""
        super().__init__(ChatMessageModel)

    async def add_message(
        self,
        session: AsyncSession,
        session_id: UUID,
        role: MessageRole,
        content: str,
    ) -> ChatMessageModel:
        """
        Append a message to a session transcript.

        Args:
            session: Async database session
            session_id: Owning chat session
            role: user or assistant
            content: Message text

        Returns:
            Created ChatMessageModel
        """
        return await self.create(session, session_id=session_id, role=role, content=content)

    async def get_recent(
        self,
        session: AsyncSession,
        session_id: UUID,
        limit: int,
    ) -> list[ChatMessageModel]:
        """
        Retrieve the most recent messages, returned oldest first.

        Args:
            session: Async database session
            session_id: Chat session UUID
            limit: Maximum number of messages

        Returns:
            Messages in ascending creation order
        """
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.session_id == session_id)
            .order_by(ChatMessageModel.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(reversed(result.scalars().all()))

    async def get_for_session(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> Sequence[ChatMessageModel]:
        """
        Retrieve the full transcript of a session in creation order.

        Args:
            session: Async database session
            session_id: Chat session UUID

        Returns:
            Messages in ascending creation order
        """
        stmt = (
            select(ChatMessageModel)
            .where(ChatMessageModel.session_id == session_id)
            .order_by(ChatMessageModel.created_at.asc())
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_for_sessions_since(
        self,
        session: AsyncSession,
        session_ids: Sequence[UUID],
        since: datetime,
    ) -> int:
        """
        Count messages across several sessions inside a window.

        Args:
            session: Async database session
            session_ids: Sessions to include
            since: Window start

        Returns:
            Number of messages (0 when session_ids is empty)
        """
        if not session_ids:
            return 0
        stmt = select(func.count(ChatMessageModel.id)).where(
            ChatMessageModel.session_id.in_(session_ids),
            ChatMessageModel.created_at >= since,
        )
        result = await session.execute(stmt)
        return result.scalar_one() or 0


chat_message_crud = ChatMessageCRUD()
