"""
Chat session ORM model.

Represents one visitor conversation with the hosted chat endpoint. Only a
one-way hash of the bearer token is stored.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.base
System role: Session persistence for authentication and abuse control
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_chat.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ChatSessionModel(Base, UUIDMixin, TimestampMixin):
    """
    Chat session ORM model.

    Created on the first message of a conversation and mutated on every
    accepted message. Never deleted by this service; expiry is enforced at
    validation time and by an external cleanup job.

    Attributes:
        id: UUID primary key, returned to the caller as ``sessionId``
        token_hash: SHA-256 hex digest of the plaintext session token
        expires_at: Moment after which the token no longer validates
        ip_address: Source address that created the session
        client_id: Optional tenant scope for retrieval and gap tracking
        title: Display title for admin tooling
        last_message_at: Time of the most recent accepted user message
        message_count: Accepted user messages
        had_knowledge_gaps: Whether any turn was answered without confident context
    """

    __tablename__ = "chat_sessions"

    token_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="New Chat")
    last_message_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    had_knowledge_gaps: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    messages = relationship(
        "ChatMessageModel",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ChatMessageModel.created_at",
    )
