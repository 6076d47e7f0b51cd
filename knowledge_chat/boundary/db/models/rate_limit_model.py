"""
Session rate-limit window ORM model.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.base
System role: Shared-datastore state for the per-session sliding window
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_chat.boundary.db.base import Base, TimestampMixin, UUIDMixin


class SessionRateLimitModel(Base, UUIDMixin, TimestampMixin):
    """
    One active counting window per chat session.

    The unique constraint on session_id lets the limiter create the window
    with an insert-or-ignore and advance it with conditional updates only.

    Attributes:
        session_id: Chat session being counted (unique)
        window_start: Start of the current window
        request_count: Accepted requests inside the current window
    """

    __tablename__ = "session_rate_limits"

    session_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    window_start: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    request_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
