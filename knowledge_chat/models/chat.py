"""
Chat domain models and schemas.

Request/response schemas for the chat endpoint. Field names are camelCase on
the wire to match the embeddable widget.

Dependencies: pydantic
System role: Chat API contracts
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from knowledge_chat.boundary.db.models.chat_message_model import MessageRole


class ChatCompletionRequest(BaseModel):
    """Request schema for one chat turn.

    Content checks (blank or oversized message, identifier format) run in the
    chat service so every rejection shares one error shape.
    """

    model_config = ConfigDict(populate_by_name=True)

    message: str | None = Field(default=None, description="Visitor message")
    session_id: str | None = Field(
        default=None,
        alias="sessionId",
        description="Existing session id; omit to start a session",
    )
    session_token: str | None = Field(
        default=None,
        alias="sessionToken",
        description="Bearer token returned when the session was created",
    )
    client_id: str | None = Field(
        default=None,
        alias="clientId",
        description="Tenant whose knowledge base answers the question",
    )


class ChatCompletionResponse(BaseModel):
    """Response schema for one chat turn."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(description="Assistant reply")
    session_id: UUID = Field(alias="sessionId")
    session_token: str = Field(alias="sessionToken")


class ChatMessageResponse(BaseModel):
    """Single chat message in a transcript."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    role: MessageRole = Field(description="Message role: user or assistant")
    content: str = Field(description="Message content")
    created_at: datetime = Field(alias="createdAt")


class ChatHistoryResponse(BaseModel):
    """Response schema for a session transcript."""

    messages: list[ChatMessageResponse]
    total: int = Field(description="Total number of messages")
