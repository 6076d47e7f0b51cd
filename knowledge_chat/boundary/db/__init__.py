"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin, utcnow: Model building blocks
  - get_async_engine(), get_async_session_factory(), get_async_db(): Async connection management
  - ChatSessionModel, ChatMessageModel, SessionRateLimitModel, KnowledgeGapModel: Chat entities
  - DocumentModel, DocumentChunkModel, ClientSettingsModel: Knowledge base and tenant settings
  - chat_session_crud, chat_message_crud, rate_limit_crud, ...: CRUD operation singletons

Dependencies: sqlalchemy, knowledge_chat.configs
System role: Database adapter providing persistent storage for sessions,
transcripts, rate-limit windows and knowledge gaps.
"""

from knowledge_chat.boundary.db.base import Base, TimestampMixin, UUIDMixin, utcnow
from knowledge_chat.boundary.db.connection import (
    get_async_db,
    get_async_engine,
    get_async_session_factory,
)
from knowledge_chat.boundary.db.models import (
    ChatMessageModel,
    ChatSessionModel,
    ClientSettingsModel,
    DocumentChunkModel,
    DocumentModel,
    GapStatus,
    KnowledgeGapModel,
    MessageRole,
    SessionRateLimitModel,
)
from knowledge_chat.boundary.db.CRUD import (
    BaseCRUD,
    chat_message_crud,
    chat_session_crud,
    client_settings_crud,
    document_chunk_crud,
    knowledge_gap_crud,
    rate_limit_crud,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "utcnow",
    # Connection
    "get_async_db",
    "get_async_engine",
    "get_async_session_factory",
    # Models
    "ChatSessionModel",
    "ChatMessageModel",
    "MessageRole",
    "SessionRateLimitModel",
    "KnowledgeGapModel",
    "GapStatus",
    "DocumentModel",
    "DocumentChunkModel",
    "ClientSettingsModel",
    # CRUD
    "BaseCRUD",
    "chat_session_crud",
    "chat_message_crud",
    "rate_limit_crud",
    "knowledge_gap_crud",
    "document_chunk_crud",
    "client_settings_crud",
]
