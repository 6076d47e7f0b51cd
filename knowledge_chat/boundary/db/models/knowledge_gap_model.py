"""
Knowledge gap ORM model.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.base
System role: Follow-up queue of questions answered without confident context
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_chat.boundary.db.base import Base, TimestampMixin, UUIDMixin


class GapStatus(str, enum.Enum):
    """
    Knowledge gap review states.

    PENDING: Recorded by the chat endpoint, awaiting review
    RESOLVED: Knowledge base updated to cover the question
    IGNORED: Reviewed and dismissed
    """

    PENDING = "pending"
    RESOLVED = "resolved"
    IGNORED = "ignored"


class KnowledgeGapModel(Base, UUIDMixin, TimestampMixin):
    """
    Knowledge gap ORM model.

    Created only by the chat endpoint; status transitions, notes and
    resolution fields are written by admin tooling.

    Attributes:
        client_id: Tenant whose knowledge base lacked the answer
        session_id: Chat session where the question was asked
        user_question: Literal question text
        status: pending, resolved or ignored
        notes: Reviewer notes
        resolved_at: When the gap was closed
        resolved_by: Reviewer identifier
    """

    __tablename__ = "knowledge_gaps"

    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )
    session_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("chat_sessions.id", ondelete="SET NULL"),
        nullable=True,
    )
    user_question: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[GapStatus] = mapped_column(
        Enum(
            GapStatus,
            native_enum=False,
            length=16,
            values_callable=lambda statuses: [status.value for status in statuses],
        ),
        nullable=False,
        default=GapStatus.PENDING,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    resolved_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
