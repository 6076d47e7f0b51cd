"""Knowledge gap review endpoints.

Routes:
- GET /knowledge-gaps - List a client's knowledge gaps, newest first (X-Admin-Key header)

Dependencies: knowledge_chat.application.services.knowledge_gap_service
System role: Knowledge gap review HTTP API
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from knowledge_chat.api.deps import get_knowledge_gap_service, require_admin_key
from knowledge_chat.application.services.knowledge_gap_service import KnowledgeGapService
from knowledge_chat.boundary.db.models.knowledge_gap_model import GapStatus
from knowledge_chat.models.common import ErrorResponse
from knowledge_chat.models.knowledge_gap import KnowledgeGapListResponse, KnowledgeGapResponse

router = APIRouter(
    prefix="/knowledge-gaps",
    tags=["knowledge-gaps"],
    dependencies=[Depends(require_admin_key)],
)


@router.get("", response_model=KnowledgeGapListResponse, responses={403: {"model": ErrorResponse}})
async def list_knowledge_gaps(
    client_id: UUID = Query(description="Tenant whose gaps to list"),
    status: GapStatus | None = Query(default=None, description="Only gaps in this status"),
    date_from: datetime | None = Query(default=None, description="Created at or after"),
    date_to: datetime | None = Query(default=None, description="Created at or before"),
    gap_service: KnowledgeGapService = Depends(get_knowledge_gap_service),
) -> KnowledgeGapListResponse:
    """List knowledge gaps for review."""
    gaps = await gap_service.list_gaps(
        client_id,
        status=status,
        date_from=date_from,
        date_to=date_to,
    )
    return KnowledgeGapListResponse(
        gaps=[KnowledgeGapResponse.model_validate(gap) for gap in gaps],
        total=len(gaps),
    )
