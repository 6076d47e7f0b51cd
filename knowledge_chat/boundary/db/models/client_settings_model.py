"""
Client settings ORM model.

Only the fields the chat endpoint reads are mapped; widget styling columns
belong to the admin dashboard.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.base
System role: Per-tenant prompt customization
"""

import uuid

from sqlalchemy import Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from knowledge_chat.boundary.db.base import Base, TimestampMixin, UUIDMixin


class ClientSettingsModel(Base, UUIDMixin, TimestampMixin):
    """
    Per-client chat configuration.

    Attributes:
        client_id: Tenant identifier (unique)
        system_prompt: Custom instruction replacing the default one
    """

    __tablename__ = "client_settings"

    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        nullable=False,
        unique=True,
    )
    system_prompt: Mapped[str | None] = mapped_column(Text, nullable=True)
