"""Service orchestrators."""

from .chat_service import ChatService, ChatState, ChatTurnResult
from .knowledge_gap_service import KnowledgeGapService
from .rate_limiter import RateLimiter
from .session_service import SessionService

__all__ = [
    "ChatService",
    "ChatState",
    "ChatTurnResult",
    "KnowledgeGapService",
    "RateLimiter",
    "SessionService",
]
