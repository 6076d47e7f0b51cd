"""
Chat message ORM model.

Append-only transcript rows, ordered by creation time within a session.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.base
System role: Conversation persistence
"""

import enum
import uuid

from sqlalchemy import Enum, ForeignKey, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_chat.boundary.db.base import Base, CreatedAtMixin, UUIDMixin


class MessageRole(str, enum.Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessageModel(Base, UUIDMixin, CreatedAtMixin):
    """
    Chat message ORM model.

    Attributes:
        id: UUID primary key
        session_id: Owning chat session (cascade delete)
        role: user or assistant
        content: Message text
        created_at: Insert time, defines transcript order
    """

    __tablename__ = "chat_messages"

    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[MessageRole] = mapped_column(
        Enum(
            MessageRole,
            native_enum=False,
            length=16,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    session = relationship("ChatSessionModel", back_populates="messages")
