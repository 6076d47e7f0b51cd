"""
Database models package.

Exports:
  - ChatSessionModel: Visitor chat session with hashed token
  - ChatMessageModel, MessageRole: Append-only transcript
  - SessionRateLimitModel: Per-session counting window
  - KnowledgeGapModel, GapStatus: Unanswered-question queue
  - DocumentModel, DocumentChunkModel: Knowledge base (read-only here)
  - ClientSettingsModel: Per-client custom prompt

Dependencies: sqlalchemy, knowledge_chat.boundary.db.base
System role: Database model definitions for domain entities
"""

from knowledge_chat.boundary.db.models.chat_session_model import ChatSessionModel
from knowledge_chat.boundary.db.models.chat_message_model import ChatMessageModel, MessageRole
from knowledge_chat.boundary.db.models.rate_limit_model import SessionRateLimitModel
from knowledge_chat.boundary.db.models.knowledge_gap_model import GapStatus, KnowledgeGapModel
from knowledge_chat.boundary.db.models.document_model import DocumentChunkModel, DocumentModel
from knowledge_chat.boundary.db.models.client_settings_model import ClientSettingsModel

__all__ = [
    "ChatSessionModel",
    "ChatMessageModel",
    "MessageRole",
    "SessionRateLimitModel",
    "KnowledgeGapModel",
    "GapStatus",
    "DocumentModel",
    "DocumentChunkModel",
    "ClientSettingsModel",
]
