"""API-specific dependencies."""

# Re-export common dependencies
from .dependencies import (
    get_chat_service,
    get_knowledge_gap_service,
    get_service_cache,
    get_settings_dependency,
    require_admin_key,
)

__all__ = [
    "get_chat_service",
    "get_knowledge_gap_service",
    "get_service_cache",
    "get_settings_dependency",
    "require_admin_key",
]
