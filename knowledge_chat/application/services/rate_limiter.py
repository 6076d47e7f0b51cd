"""
Datastore-backed rate limiter.

Two independent ceilings over one shared window duration:

- per source address: messages across every session created from the
  address inside the window
- per session: a counting window row incremented with a single conditional
  UPDATE, so concurrent requests cannot exceed the ceiling

All state lives in the database so limits hold across processes. When the
limiter's own queries fail the request is allowed by default
(CHAT_RATE_LIMIT_FAIL_OPEN); this trades strictness for availability and is
exploitable while the datastore is degraded.

Dependencies: knowledge_chat.boundary.db.CRUD, knowledge_chat.configs
System role: Abuse control before any LLM cost is incurred
"""

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.base import utcnow
from knowledge_chat.boundary.db.CRUD.chat_message_crud import chat_message_crud
from knowledge_chat.boundary.db.CRUD.chat_session_crud import chat_session_crud
from knowledge_chat.boundary.db.CRUD.rate_limit_crud import rate_limit_crud
from knowledge_chat.configs.chat import ChatSettings
from knowledge_chat.core.exceptions import AddressRateLimitError, SessionRateLimitError

logger = logging.getLogger(__name__)


class RateLimiter:
    """Per-address and per-session request ceilings."""

    def __init__(self, db: AsyncSession, settings: ChatSettings) -> None:
        """
        Initialize rate limiter.

        Args:
            db: Async SQLAlchemy session
            settings: Window duration, ceilings and failure policy
        """
        self.db = db
        self.window = timedelta(seconds=settings.rate_limit_window_seconds)
        self.max_per_session = settings.max_requests_per_session
        self.max_per_address = settings.max_requests_per_address
        self.fail_open = settings.rate_limit_fail_open

    async def check_address(self, ip_address: str, now: datetime | None = None) -> bool:
        """
        Whether the address is still under its ceiling.

        Read-only: the message about to be stored is what counts next time.

        Args:
            ip_address: Caller source address
            now: Reference time (defaults to current UTC time)

        Returns:
            True if the request may proceed
        """
        since = (now or utcnow()) - self.window
        try:
            session_ids = await chat_session_crud.get_ids_for_address_since(
                self.db, ip_address, since
            )
            if not session_ids:
                return True
            count = await chat_message_crud.count_for_sessions_since(self.db, session_ids, since)
        except SQLAlchemyError as e:
            return await self._on_storage_failure("check_address", e)

        logger.debug(
            f"{__name__}:check_address - {ip_address} has {count} messages in window"
        )
        return count < self.max_per_address

    async def check_session(self, session_id: UUID, now: datetime | None = None) -> bool:
        """
        Count this request against the session window, if there is room.

        Steps, each a single conditional statement:
        1. increment a live window that is under the ceiling
        2. otherwise restart an expired window at 1
        3. otherwise open the first window at 1
        4. if a concurrent request opened it first, retry step 1 once

        Args:
            session_id: Chat session UUID
            now: Reference time (defaults to current UTC time)

        Returns:
            True if the request was counted, False if the ceiling is reached
        """
        now = now or utcnow()
        cutoff = now - self.window
        try:
            count = await rate_limit_crud.increment_if_below(
                self.db, session_id, cutoff, self.max_per_session, now
            )
            if count is None:
                if await rate_limit_crud.restart_if_expired(self.db, session_id, cutoff, now):
                    count = 1
                elif await rate_limit_crud.open_window(self.db, session_id, now):
                    count = 1
                else:
                    count = await rate_limit_crud.increment_if_below(
                        self.db, session_id, cutoff, self.max_per_session, now
                    )
            await self.db.commit()
        except SQLAlchemyError as e:
            return await self._on_storage_failure("check_session", e)

        if count is None:
            logger.warning(f"{__name__}:check_session - Ceiling reached for session {session_id}")
            return False
        return True

    async def enforce_address(self, ip_address: str, now: datetime | None = None) -> None:
        """
        Raises:
            AddressRateLimitError: If the address ceiling is reached
        """
        if not await self.check_address(ip_address, now):
            logger.warning(f"{__name__}:enforce_address - Rate limit exceeded for {ip_address}")
            raise AddressRateLimitError(
                "Address rate limit exceeded",
                details={"ip_address": ip_address},
            )

    async def enforce_session(self, session_id: UUID, now: datetime | None = None) -> None:
        """
        Raises:
            SessionRateLimitError: If the session ceiling is reached
        """
        if not await self.check_session(session_id, now):
            raise SessionRateLimitError(
                "Session rate limit exceeded",
                details={"session_id": str(session_id)},
            )

    async def _on_storage_failure(self, operation: str, error: SQLAlchemyError) -> bool:
        """Roll back the failed statement and apply the configured failure policy."""
        await self.db.rollback()
        logger.error(
            f"{__name__}:{operation} - Rate limit storage failure, "
            f"{'allowing' if self.fail_open else 'rejecting'} request: {error}"
        )
        return self.fail_open
