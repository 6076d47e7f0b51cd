"""
Session service orchestrator.

Issues and authenticates chat sessions. The plaintext bearer token is
returned exactly once at creation; only its SHA-256 digest is stored.

Dependencies: knowledge_chat.boundary.db.CRUD, hashlib, hmac, secrets
System role: Session use case orchestration (Session Store)
"""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.boundary.db.base import utcnow
from knowledge_chat.boundary.db.CRUD.chat_session_crud import chat_session_crud
from knowledge_chat.boundary.db.models.chat_session_model import ChatSessionModel
from knowledge_chat.core.exceptions import SessionCreationError

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def generate_session_token() -> str:
    """Random bearer token: 256 bits rendered as 64 hex characters."""
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a plaintext token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class IssuedSession:
    """A newly created session and its one-time plaintext token."""

    session: ChatSessionModel
    token: str

    @property
    def session_id(self) -> UUID:
        return self.session.id


class SessionService:
    """Session service orchestrator."""

    def __init__(self, db: AsyncSession, ttl_days: int = 30) -> None:
        """
        Initialize session service with async database session.

        Args:
            db: Async SQLAlchemy session
            ttl_days: Token lifetime for new sessions
        """
        self.db = db
        self.ttl = timedelta(days=ttl_days)

    async def create_session(
        self,
        ip_address: str,
        client_id: UUID | None = None,
        now: datetime | None = None,
    ) -> IssuedSession:
        """
        Create and commit a new session.

        Args:
            ip_address: Caller source address
            client_id: Optional tenant scope
            now: Creation time (defaults to current UTC time)

        Returns:
            IssuedSession carrying the plaintext token

        Raises:
            SessionCreationError: If the session row cannot be stored
        """
        now = now or utcnow()
        token = generate_session_token()
        try:
            session = await chat_session_crud.create(
                self.db,
                token_hash=hash_token(token),
                expires_at=now + self.ttl,
                ip_address=ip_address,
                client_id=client_id,
                created_at=now,
                updated_at=now,
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise SessionCreationError(
                "Failed to create chat session",
                details={"error": str(e)},
            ) from e

        logger.info(f"{__name__}:create_session - Created session {session.id}")
        return IssuedSession(session=session, token=token)

    async def validate_session(
        self,
        session_id: UUID,
        token: str | None,
        now: datetime | None = None,
    ) -> ChatSessionModel | None:
        """
        Authenticate a session id and plaintext token.

        Fails closed: an unknown or expired session, a missing token, or a
        mismatching token all return None. Digests are compared in constant time.

        Args:
            session_id: Session UUID
            token: Plaintext bearer token
            now: Reference time for expiry

        Returns:
            The session when the token is valid, None otherwise
        """
        if not token:
            return None

        session = await chat_session_crud.get_active_by_id(self.db, session_id, now or utcnow())
        if session is None:
            logger.info(f"{__name__}:validate_session - Unknown or expired session {session_id}")
            return None

        if not hmac.compare_digest(session.token_hash, hash_token(token)):
            logger.warning(f"{__name__}:validate_session - Token mismatch for session {session_id}")
            return None
        return session

    async def is_valid(self, session_id: UUID, token: str | None) -> bool:
        """Boolean form of validate_session."""
        return await self.validate_session(session_id, token) is not None
