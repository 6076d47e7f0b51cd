"""
Session rate-limit window CRUD operations.

Every mutation is a single conditional statement so concurrent requests on
one session cannot push request_count past the ceiling.

Dependencies: sqlalchemy (postgresql / sqlite insert dialects)
System role: Atomic counter primitives for the per-session rate limit
"""

import uuid
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.CRUD.base_crud import BaseCRUD
from knowledge_chat.boundary.db.models.rate_limit_model import SessionRateLimitModel

_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class RateLimitCRUD(BaseCRUD[SessionRateLimitModel]):
    """CRUD operations for SessionRateLimitModel."""

    def __init__(self) -> None:
        """Initialize RateLimitCRUD with SessionRateLimitModel."""
        super().__init__(SessionRateLimitModel)

    async def get_for_session(
        self,
        session: AsyncSession,
        session_id: UUID,
    ) -> SessionRateLimitModel | None:
        """Retrieve the window row for a session, if any."""
        stmt = select(SessionRateLimitModel).where(SessionRateLimitModel.session_id == session_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_if_below(
        self,
        session: AsyncSession,
        session_id: UUID,
        window_cutoff: datetime,
        max_requests: int,
        now: datetime,
    ) -> int | None:
        """
        Increment the current window if it is live and under the ceiling.

        Args:
            session: Async database session
            session_id: Chat session UUID
            window_cutoff: Windows starting before this instant are expired
            max_requests: Ceiling for request_count
            now: Update time

        Returns:
            New request_count, or None when no live window has room
        """
        stmt = (
            update(SessionRateLimitModel)
            .where(
                SessionRateLimitModel.session_id == session_id,
                SessionRateLimitModel.window_start >= window_cutoff,
                SessionRateLimitModel.request_count < max_requests,
            )
            .values(
                request_count=SessionRateLimitModel.request_count + 1,
                updated_at=now,
            )
            .returning(SessionRateLimitModel.request_count)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def restart_if_expired(
        self,
        session: AsyncSession,
        session_id: UUID,
        window_cutoff: datetime,
        now: datetime,
    ) -> bool:
        """
        Start a fresh window counting this request, only if the old one expired.

        Args:
            session: Async database session
            session_id: Chat session UUID
            window_cutoff: Windows starting before this instant are expired
            now: New window start

        Returns:
            True if an expired window was restarted
        """
        stmt = (
            update(SessionRateLimitModel)
            .where(
                SessionRateLimitModel.session_id == session_id,
                SessionRateLimitModel.window_start < window_cutoff,
            )
            .values(window_start=now, request_count=1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount > 0

    async def open_window(
        self,
        session: AsyncSession,
        session_id: UUID,
        now: datetime,
    ) -> bool:
        """
        Insert the first window for a session, ignoring a concurrent insert.

        Args:
            session: Async database session
            session_id: Chat session UUID
            now: Window start

        Returns:
            True if this call created the window

        Raises:
            NotImplementedError: If the database dialect has no insert-or-ignore
        """
        dialect = session.get_bind().dialect.name
        insert_fn = _INSERTS.get(dialect)
        if insert_fn is None:
            raise NotImplementedError(f"Rate limit windows unsupported on dialect {dialect}")

        stmt = (
            insert_fn(SessionRateLimitModel)
            .values(
                id=uuid.uuid4(),
                session_id=session_id,
                window_start=now,
                request_count=1,
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=["session_id"])
        )
        result = await session.execute(stmt)
        return result.rowcount > 0


rate_limit_crud = RateLimitCRUD()
