"""
Chat service: the completion orchestrator.

Runs one chat turn through a fixed sequence of states:

    Validating -> SessionResolving -> RateChecking -> Retrieving -> Composing
    -> Completing -> Persisting -> Done

with Errored reachable from any state. The address ceiling is checked
before a new session is created, the session ceiling once the session is
known. The user message is committed before the LLM is called, so a failed
completion never loses the user's turn; a failure to store the reply is
logged and the reply is still returned.

Dependencies: knowledge_chat.application.services, knowledge_chat.core,
knowledge_chat.boundary.db, knowledge_chat.boundary.llm, knowledge_chat.boundary.vdb
System role: Chat service orchestration layer
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from knowledge_chat.application.services.knowledge_gap_service import KnowledgeGapService
from knowledge_chat.application.services.rate_limiter import RateLimiter
from knowledge_chat.application.services.session_service import SessionService
from knowledge_chat.boundary.db.base import utcnow
from knowledge_chat.boundary.db.CRUD.chat_message_crud import chat_message_crud
from knowledge_chat.boundary.db.CRUD.chat_session_crud import chat_session_crud
from knowledge_chat.boundary.db.CRUD.client_settings_crud import client_settings_crud
from knowledge_chat.boundary.db.models.chat_message_model import ChatMessageModel, MessageRole
from knowledge_chat.boundary.db.models.chat_session_model import ChatSessionModel
from knowledge_chat.boundary.llm.completion_client import CompletionClient
from knowledge_chat.boundary.llm.embedder import QueryEmbedder
from knowledge_chat.boundary.vdb import ChunkSearch, get_chunk_search
from knowledge_chat.configs.chat import ChatSettings
from knowledge_chat.core.exceptions import AuthenticationError, CompletionError
from knowledge_chat.core.prompt_composer import compose_system_prompt
from knowledge_chat.core.retriever import RetrievalEngine, RetrievalResult
from knowledge_chat.core.validation import parse_identifier, validate_message
from knowledge_chat.observability.log_utils import log_exception_with_context, safe_log_value

logger = logging.getLogger(__name__)


class ChatState(str, enum.Enum):
    """Orchestrator states for one chat turn."""

    VALIDATING = "validating"
    SESSION_RESOLVING = "session_resolving"
    RATE_CHECKING = "rate_checking"
    RETRIEVING = "retrieving"
    COMPOSING = "composing"
    COMPLETING = "completing"
    PERSISTING = "persisting"
    DONE = "done"
    ERRORED = "errored"


@dataclass(frozen=True)
class ChatTurnResult:
    """
    Outcome of a successful chat turn.

    Attributes:
        message: Assistant reply
        session_id: Session the turn belongs to
        session_token: Plaintext token (newly issued or echoed back)
        retrieval: Retrieval diagnostics for the turn
    """

    message: str
    session_id: UUID
    session_token: str
    retrieval: RetrievalResult


class ChatService:
    """
    Completion orchestrator.

    One instance handles one request; it holds the request's database
    session and the shared model clients.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: ChatSettings,
        embedder: QueryEmbedder,
        completion_client: CompletionClient,
        chunk_search: ChunkSearch | None = None,
    ) -> None:
        """
        Initialize chat service.

        Args:
            db: AsyncSession for database operations
            settings: Chat policy configuration
            embedder: Question embedding client
            completion_client: Chat completion client
            chunk_search: Similarity search backend (defaults to the configured one)
        """
        self.db = db
        self.settings = settings
        self.completion_client = completion_client
        self.sessions = SessionService(db, ttl_days=settings.session_ttl_days)
        self.rate_limiter = RateLimiter(db, settings)
        self.gaps = KnowledgeGapService(db)
        self.retrieval = RetrievalEngine(embedder, chunk_search or get_chunk_search(db))
        self.state = ChatState.VALIDATING

    def _transition(self, state: ChatState) -> None:
        logger.debug(f"{__name__}:_transition - {self.state.value} -> {state.value}")
        self.state = state

    async def process_message(
        self,
        message: Any,
        session_id: Any = None,
        session_token: str | None = None,
        client_id: Any = None,
        ip_address: str = "unknown",
    ) -> ChatTurnResult:
        """
        Handle one chat turn end to end.

        Args:
            message: Raw visitor message
            session_id: Existing session id, or None to start a session
            session_token: Bearer token for session_id
            client_id: Optional tenant id
            ip_address: Caller source address

        Returns:
            ChatTurnResult with the reply and session credentials

        Raises:
            ValidationError: Malformed message or identifiers (no side effects)
            AuthenticationError: Session id without a valid token
            AddressRateLimitError: Address ceiling reached
            SessionRateLimitError: Session ceiling reached
            SessionCreationError: New session could not be stored
            CompletionError: LLM failure (the user message stays stored)
        """
        try:
            result = await self._run_turn(message, session_id, session_token, client_id, ip_address)
        except Exception:
            self._transition(ChatState.ERRORED)
            raise
        self._transition(ChatState.DONE)
        return result

    async def _run_turn(
        self,
        message: Any,
        session_id: Any,
        session_token: str | None,
        client_id: Any,
        ip_address: str,
    ) -> ChatTurnResult:
        now = utcnow()

        self._transition(ChatState.VALIDATING)
        text = validate_message(message, self.settings.max_message_length)
        requested_session_id = parse_identifier(session_id, "sessionId", "session ID")
        requested_client_id = parse_identifier(client_id, "clientId", "client ID")

        self._transition(ChatState.RATE_CHECKING)
        await self.rate_limiter.enforce_address(ip_address, now)

        self._transition(ChatState.SESSION_RESOLVING)
        session, token = await self._resolve_session(
            requested_session_id, session_token, requested_client_id, ip_address, now
        )
        effective_client_id = requested_client_id or session.client_id

        self._transition(ChatState.RATE_CHECKING)
        await self.rate_limiter.enforce_session(session.id, now)

        self._transition(ChatState.PERSISTING)
        await self._store_user_message(session.id, text, now)
        turns = await self._load_history(session.id, text)

        self._transition(ChatState.RETRIEVING)
        retrieval = await self.retrieval.retrieve(text, effective_client_id)
        logger.info(
            f"{__name__}:_run_turn - Retrieval tier={retrieval.tier.value} "
            f"chunks={retrieval.chunk_count} best={retrieval.best_similarity:.3f} "
            f"gap={retrieval.has_knowledge_gap}"
        )

        self._transition(ChatState.COMPOSING)
        custom_prompt = await self._custom_prompt(effective_client_id)
        system_prompt = compose_system_prompt(retrieval.context, custom_prompt)

        self._transition(ChatState.COMPLETING)
        try:
            reply = await self.completion_client.complete(system_prompt, turns)
        except CompletionError as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_run_turn - Completion failed for session {session.id}",
                e,
                question=safe_log_value(text, max_length=80),
            )
            raise

        self._transition(ChatState.PERSISTING)
        await self._store_assistant_message(session.id, reply)
        if retrieval.has_knowledge_gap:
            await self._record_gap(effective_client_id, session.id, text)

        return ChatTurnResult(
            message=reply,
            session_id=session.id,
            session_token=token,
            retrieval=retrieval,
        )

    async def _resolve_session(
        self,
        session_id: UUID | None,
        session_token: str | None,
        client_id: UUID | None,
        ip_address: str,
        now: datetime,
    ) -> tuple[ChatSessionModel, str]:
        """Create a session, or authenticate the one the caller named."""
        if session_id is None:
            issued = await self.sessions.create_session(ip_address, client_id, now)
            return issued.session, issued.token

        if not session_token:
            raise AuthenticationError("Session token required", code="SESSION_TOKEN_REQUIRED")

        session = await self.sessions.validate_session(session_id, session_token, now)
        if session is None:
            raise AuthenticationError("Invalid session credentials", code="INVALID_SESSION")
        return session, session_token

    async def _store_user_message(self, session_id: UUID, text: str, now: datetime) -> None:
        try:
            await chat_message_crud.add_message(self.db, session_id, MessageRole.USER, text)
            await chat_session_crud.record_user_message(self.db, session_id, now)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:_store_user_message - Failed for session {session_id}: {e}")

    async def _load_history(self, session_id: UUID, text: str) -> list[tuple[str, str]]:
        """Recent transcript as (role, content) pairs, always ending with the current message."""
        try:
            recent = await chat_message_crud.get_recent(
                self.db, session_id, self.settings.history_window
            )
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:_load_history - Failed for session {session_id}: {e}")
            recent = []

        turns = [(m.role.value, m.content) for m in recent]
        if not turns or turns[-1] != (MessageRole.USER.value, text):
            turns.append((MessageRole.USER.value, text))
        return turns

    async def _custom_prompt(self, client_id: UUID | None) -> str | None:
        if client_id is None:
            return None
        try:
            return await client_settings_crud.get_system_prompt(self.db, client_id)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.warning(f"{__name__}:_custom_prompt - Lookup failed for client {client_id}: {e}")
            return None

    async def _store_assistant_message(self, session_id: UUID, reply: str) -> None:
        try:
            await chat_message_crud.add_message(self.db, session_id, MessageRole.ASSISTANT, reply)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"{__name__}:_store_assistant_message - Failed for session {session_id}: {e}"
            )

    async def _record_gap(self, client_id: UUID | None, session_id: UUID, text: str) -> None:
        try:
            await self.gaps.record_gap(client_id, session_id, text)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"{__name__}:_record_gap - Failed for session {session_id}: {e}")

    async def get_transcript(
        self,
        session_id: Any,
        session_token: str | None,
    ) -> Sequence[ChatMessageModel]:
        """
        Return a session's messages in creation order.

        Args:
            session_id: Session id string or UUID
            session_token: Bearer token for the session

        Returns:
            Messages, oldest first

        Raises:
            ValidationError: Malformed session id
            AuthenticationError: Missing or invalid token
        """
        if isinstance(session_id, UUID):
            parsed = session_id
        else:
            parsed = parse_identifier(session_id, "sessionId", "session ID")
        if parsed is None:
            raise AuthenticationError("Session ID required", code="INVALID_SESSION")
        if not session_token:
            raise AuthenticationError("Session token required", code="SESSION_TOKEN_REQUIRED")

        session = await self.sessions.validate_session(parsed, session_token)
        if session is None:
            raise AuthenticationError("Invalid session credentials", code="INVALID_SESSION")
        return await chat_message_crud.get_for_session(self.db, parsed)
