"""Chat API endpoints.

Routes:
- POST /chat/completions - Answer one visitor message from the client's knowledge base
- GET /chat/sessions/{session_id}/messages - Session transcript (X-Session-Token header)

Errors are raised as KnowledgeChatException subclasses and rendered by the
application's exception handlers as {"error": ..., "code": ...}.

Dependencies: knowledge_chat.application.services.chat_service
System role: Chat messaging HTTP API
"""

import logging

from fastapi import APIRouter, Depends, Header, Request

from knowledge_chat.api.deps import get_chat_service
from knowledge_chat.api.routers.router_utils import get_source_address, run_until_disconnect
from knowledge_chat.application.services.chat_service import ChatService
from knowledge_chat.models.chat import (
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatHistoryResponse,
    ChatMessageResponse,
)
from knowledge_chat.models.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(
    "/completions",
    response_model=ChatCompletionResponse,
    responses=ERROR_RESPONSES,
)
async def chat_completion(
    body: ChatCompletionRequest,
    request: Request,
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatCompletionResponse:
    """Send one visitor message and receive the assistant reply.

    Without sessionId a new session is created and its token returned once;
    with sessionId the matching sessionToken is required.

    Args:
        body: Message plus optional session credentials and client id
        request: Raw request (source address, disconnect detection)
        chat_service: Injected ChatService

    Returns:
        ChatCompletionResponse: Reply with session id and token
    """
    result = await run_until_disconnect(
        request,
        chat_service.process_message(
            message=body.message,
            session_id=body.session_id,
            session_token=body.session_token,
            client_id=body.client_id,
            ip_address=get_source_address(request),
        ),
    )
    return ChatCompletionResponse(
        message=result.message,
        session_id=result.session_id,
        session_token=result.session_token,
    )


@router.get(
    "/sessions/{session_id}/messages",
    response_model=ChatHistoryResponse,
    responses=ERROR_RESPONSES,
)
async def get_session_messages(
    session_id: str,
    x_session_token: str | None = Header(default=None, alias="X-Session-Token"),
    chat_service: ChatService = Depends(get_chat_service),
) -> ChatHistoryResponse:
    """Return the transcript of a session the caller holds the token for.

    Args:
        session_id: Session UUID
        x_session_token: Session bearer token
        chat_service: Injected ChatService

    Returns:
        ChatHistoryResponse: Messages in creation order
    """
    messages = await chat_service.get_transcript(session_id, x_session_token)
    return ChatHistoryResponse(
        messages=[ChatMessageResponse.model_validate(m) for m in messages],
        total=len(messages),
    )
