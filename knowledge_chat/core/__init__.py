"""
Core business logic module.

Contains the exception hierarchy and the pure domain pieces of the chat
pipeline: validation, tiered retrieval, similarity scoring and prompt
composition.
"""

from knowledge_chat.core.exceptions import (
    AdminAccessError,
    AddressRateLimitError,
    AuthenticationError,
    ClientDisconnectedError,
    CompletionError,
    EmbeddingError,
    KnowledgeChatException,
    RateLimitError,
    SessionCreationError,
    SessionRateLimitError,
    ValidationError,
    VectorStoreError,
)

__all__ = [
    "KnowledgeChatException",
    "AdminAccessError",
    "ClientDisconnectedError",
    "ValidationError",
    "AuthenticationError",
    "RateLimitError",
    "AddressRateLimitError",
    "SessionRateLimitError",
    "SessionCreationError",
    "CompletionError",
    "EmbeddingError",
    "VectorStoreError",
]
