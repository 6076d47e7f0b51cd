"""
Chat request validation.

Checks run before any datastore access and raise ValidationError with a
message suitable for the caller.

Dependencies: knowledge_chat.core.exceptions
System role: Input validation for the chat endpoint
"""

import re
import uuid
from typing import Any

from knowledge_chat.core.exceptions import ValidationError

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def validate_message(message: Any, max_length: int = 1000) -> str:
    """
    Validate and trim a visitor message.

    Args:
        message: Raw message value from the request
        max_length: Maximum length after trimming

    Returns:
        The trimmed message

    Raises:
        ValidationError: If missing, not a string, blank, or too long
    """
    if not message or not isinstance(message, str):
        raise ValidationError("Message is required and must be a string", field="message")

    trimmed = message.strip()
    if not trimmed:
        raise ValidationError("Message cannot be empty", field="message")
    if len(trimmed) > max_length:
        raise ValidationError(
            f"Message must be {max_length} characters or less",
            field="message",
            details={"length": len(trimmed)},
        )
    return trimmed


def parse_identifier(value: Any, field: str, label: str) -> uuid.UUID | None:
    """
    Parse an optional canonical UUID string.

    Args:
        value: Raw value; None or empty string means absent
        field: Request field name for error context
        label: Human-readable name used in the error message

    Returns:
        Parsed UUID, or None when absent

    Raises:
        ValidationError: If present but not a canonical UUID string
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str) or not UUID_PATTERN.match(value):
        raise ValidationError(f"Invalid {label} format", field=field)
    return uuid.UUID(value)
