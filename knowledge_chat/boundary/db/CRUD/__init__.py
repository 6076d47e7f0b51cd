"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations
with pre-instantiated singletons for direct use.

Usage:
    from knowledge_chat.boundary.db.CRUD import chat_session_crud, chat_message_crud

    session = await chat_session_crud.get_by_id(db, session_id)
"""

from knowledge_chat.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_chat.boundary.db.CRUD.chat_session_crud import ChatSessionCRUD, chat_session_crud
from knowledge_chat.boundary.db.CRUD.chat_message_crud import ChatMessageCRUD, chat_message_crud
from knowledge_chat.boundary.db.CRUD.rate_limit_crud import RateLimitCRUD, rate_limit_crud
from knowledge_chat.boundary.db.CRUD.knowledge_gap_crud import KnowledgeGapCRUD, knowledge_gap_crud
from knowledge_chat.boundary.db.CRUD.document_chunk_crud import (
    DocumentChunkCRUD,
    document_chunk_crud,
)
from knowledge_chat.boundary.db.CRUD.client_settings_crud import (
    ClientSettingsCRUD,
    client_settings_crud,
)

__all__ = [
    "BaseCRUD",
    "ChatSessionCRUD",
    "ChatMessageCRUD",
    "RateLimitCRUD",
    "KnowledgeGapCRUD",
    "DocumentChunkCRUD",
    "ClientSettingsCRUD",
    "chat_session_crud",
    "chat_message_crud",
    "rate_limit_crud",
    "knowledge_gap_crud",
    "document_chunk_crud",
    "client_settings_crud",
]
