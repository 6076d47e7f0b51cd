"""
Knowledge gap schemas.

Dependencies: pydantic
System role: Knowledge gap review API contracts
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from knowledge_chat.boundary.db.models.knowledge_gap_model import GapStatus


class KnowledgeGapResponse(BaseModel):
    """Single knowledge gap."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID | None
    session_id: UUID | None
    user_question: str
    status: GapStatus
    notes: str | None = None
    created_at: datetime
    resolved_at: datetime | None = None
    resolved_by: str | None = None


class KnowledgeGapListResponse(BaseModel):
    """Knowledge gaps for one client, newest first."""

    gaps: list[KnowledgeGapResponse]
    total: int = Field(description="Number of gaps returned")
