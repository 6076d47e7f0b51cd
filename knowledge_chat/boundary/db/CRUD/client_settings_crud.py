"""
Client settings CRUD operations.

Dependencies: sqlalchemy, knowledge_chat.boundary.db.models
System role: Per-client prompt lookup
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_chat.boundary.db.models.client_settings_model import ClientSettingsModel


class ClientSettingsCRUD(BaseCRUD[ClientSettingsModel]):
    """CRUD operations for ClientSettingsModel."""

    def __init__(self) -> None:
        """Initialize ClientSettingsCRUD with ClientSettingsModel."""
        super().__init__(ClientSettingsModel)

    async def get_system_prompt(self, session: AsyncSession, client_id: UUID) -> str | None:
        """
        Retrieve a client's custom system prompt.

        Args:
            session: Async database session
            client_id: Tenant UUID

        Returns:
            The prompt text, or None when unset or blank
        """
        stmt = select(ClientSettingsModel.system_prompt).where(
            ClientSettingsModel.client_id == client_id
        )
        result = await session.execute(stmt)
        prompt = result.scalar_one_or_none()
        if prompt is None or not prompt.strip():
            return None
        return prompt


client_settings_crud = ClientSettingsCRUD()
