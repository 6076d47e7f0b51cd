"""
Observability module.

Provides logging configuration, correlation ID tracking, request logging
middleware and safe log helpers.
"""

from knowledge_chat.observability.correlation import get_correlation_id, set_correlation_id
from knowledge_chat.observability.log_utils import log_exception_with_context, safe_log_value
from knowledge_chat.observability.logger import configure_logging, get_logger
from knowledge_chat.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

__all__ = [
    "configure_logging",
    "get_logger",
    "get_correlation_id",
    "set_correlation_id",
    "safe_log_value",
    "log_exception_with_context",
    "CorrelationMiddleware",
    "RequestLoggingMiddleware",
]
