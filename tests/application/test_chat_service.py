"""
End-to-end tests for the chat completion orchestrator.

Runs full chat turns against an in-memory database with the in-process
chunk search, fake embeddings and a mocked chat model.

System role: Verification of chat turn orchestration
"""

import uuid

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from sqlalchemy import func, select

from knowledge_chat.application.services.chat_service import ChatService, ChatState
from knowledge_chat.boundary.db.CRUD.chat_message_crud import chat_message_crud
from knowledge_chat.boundary.db.CRUD.chat_session_crud import chat_session_crud
from knowledge_chat.boundary.db.CRUD.knowledge_gap_crud import knowledge_gap_crud
from knowledge_chat.boundary.db.models import (
    ChatMessageModel,
    ChatSessionModel,
    ClientSettingsModel,
    GapStatus,
    KnowledgeGapModel,
    MessageRole,
)
from knowledge_chat.boundary.vdb.scan_store import ScanChunkSearch
from knowledge_chat.core.exceptions import (
    AddressRateLimitError,
    AuthenticationError,
    CompletionError,
    SessionRateLimitError,
    ValidationError,
)
from knowledge_chat.core.prompt_composer import (
    CONTEXT_FOOTER,
    DEFAULT_INSTRUCTION,
    NO_CONTEXT_INSTRUCTION,
)
from knowledge_chat.core.retriever import RetrievalTier

REFUND_CHUNK = "Refunds are issued within 30 days of purchase."


@pytest.fixture
def make_service(test_async_db, chat_settings, embedder, completion_client):
    """Factory building a ChatService with optional policy overrides."""

    def _make(**overrides) -> ChatService:
        settings = chat_settings.model_copy(update=overrides)
        return ChatService(
            test_async_db,
            settings,
            embedder,
            completion_client,
            chunk_search=ScanChunkSearch(test_async_db),
        )

    return _make


def sent_messages(mock_chat_model) -> list:
    """Messages passed to the chat model on its last call."""
    return mock_chat_model.ainvoke.await_args.args[0]


async def count_rows(db, model) -> int:
    result = await db.execute(select(func.count(model.id)))
    return result.scalar_one()


class TestChatTurn:
    """Test suite for successful chat turns."""

    @pytest.mark.asyncio
    async def test_grounded_answer_creates_session(
        self, test_async_db, make_service, add_document, mock_chat_model
    ) -> None:
        """A strongly matching question is answered from context with no gap."""
        # Arrange
        await add_document([(REFUND_CHUNK, [1.0, 0.0, 0.0])], title="Refund Policy v2")
        service = make_service()

        # Act
        result = await service.process_message(
            "What is your refund policy?", ip_address="203.0.113.5"
        )

        # Assert
        assert result.message == "Here is what I found."
        assert len(result.session_token) == 64
        assert result.retrieval.tier == RetrievalTier.STRICT
        assert result.retrieval.has_knowledge_gap is False
        assert service.state == ChatState.DONE

        system_prompt = sent_messages(mock_chat_model)[0].content
        assert REFUND_CHUNK in system_prompt
        assert DEFAULT_INSTRUCTION in system_prompt
        assert CONTEXT_FOOTER in system_prompt
        assert "Refund Policy v2" not in system_prompt

        transcript = await chat_message_crud.get_for_session(test_async_db, result.session_id)
        assert [(m.role, m.content) for m in transcript] == [
            (MessageRole.USER, "What is your refund policy?"),
            (MessageRole.ASSISTANT, "Here is what I found."),
        ]
        session = await chat_session_crud.get_by_id(test_async_db, result.session_id)
        await test_async_db.refresh(session)
        assert session.message_count == 1
        assert session.ip_address == "203.0.113.5"
        assert session.had_knowledge_gaps is False
        assert await count_rows(test_async_db, KnowledgeGapModel) == 0

    @pytest.mark.asyncio
    async def test_message_is_trimmed_before_storage(self, test_async_db, make_service) -> None:
        service = make_service()

        result = await service.process_message("   hello there \n")

        transcript = await chat_message_crud.get_for_session(test_async_db, result.session_id)
        assert transcript[0].content == "hello there"

    @pytest.mark.asyncio
    async def test_empty_knowledge_base_records_gap(
        self, test_async_db, make_service, mock_chat_model
    ) -> None:
        """With nothing to retrieve, the model is told to admit it and a gap is queued."""
        client_id = uuid.uuid4()
        service = make_service()

        result = await service.process_message(
            "What's the weather tomorrow?", client_id=str(client_id)
        )

        assert result.retrieval.tier == RetrievalTier.NONE
        system_prompt = sent_messages(mock_chat_model)[0].content
        assert NO_CONTEXT_INSTRUCTION in system_prompt
        assert CONTEXT_FOOTER not in system_prompt

        gaps = await knowledge_gap_crud.list_for_client(test_async_db, client_id)
        assert len(gaps) == 1
        assert gaps[0].user_question == "What's the weather tomorrow?"
        assert gaps[0].status == GapStatus.PENDING
        assert gaps[0].session_id == result.session_id

        session = await chat_session_crud.get_by_id(test_async_db, result.session_id)
        await test_async_db.refresh(session)
        assert session.had_knowledge_gaps is True
        assert session.client_id == client_id

    @pytest.mark.asyncio
    async def test_relaxed_match_answers_and_records_gap(
        self, test_async_db, make_service, add_document
    ) -> None:
        await add_document([("Standard shipping takes five days.", [0.6, 0.8, 0.0])])
        service = make_service()

        result = await service.process_message("Do you offer a refund?")

        assert result.retrieval.tier == RetrievalTier.RELAXED
        assert result.retrieval.has_knowledge_gap is True
        assert await count_rows(test_async_db, KnowledgeGapModel) == 1

    @pytest.mark.asyncio
    async def test_continuing_session_sends_history(
        self, test_async_db, make_service, mock_chat_model
    ) -> None:
        """The second turn reuses the session and forwards prior messages in order."""
        first = await make_service().process_message("Hello")

        second = await make_service().process_message(
            "And what about refunds?",
            session_id=str(first.session_id),
            session_token=first.session_token,
        )

        assert second.session_id == first.session_id
        assert second.session_token == first.session_token
        messages = sent_messages(mock_chat_model)
        assert [type(m) for m in messages] == [SystemMessage, HumanMessage, AIMessage, HumanMessage]
        assert messages[-1].content == "And what about refunds?"
        assert await count_rows(test_async_db, ChatSessionModel) == 1
        session = await chat_session_crud.get_by_id(test_async_db, first.session_id)
        await test_async_db.refresh(session)
        assert session.message_count == 2

    @pytest.mark.asyncio
    async def test_history_is_bounded(self, make_service, mock_chat_model) -> None:
        first = await make_service(history_window=2).process_message("one")
        service = make_service(history_window=2)

        await service.process_message(
            "two", session_id=str(first.session_id), session_token=first.session_token
        )

        messages = sent_messages(mock_chat_model)
        assert [m.content for m in messages[1:]] == ["Here is what I found.", "two"]

    @pytest.mark.asyncio
    async def test_custom_prompt_replaces_default_instruction(
        self, test_async_db, make_service, add_document, mock_chat_model
    ) -> None:
        client_id = uuid.uuid4()
        test_async_db.add(
            ClientSettingsModel(client_id=client_id, system_prompt="You are Acme's concierge.")
        )
        await test_async_db.commit()
        await add_document([(REFUND_CHUNK, [1.0, 0.0, 0.0])], client_id=client_id)

        await make_service().process_message("refund?", client_id=str(client_id))

        system_prompt = sent_messages(mock_chat_model)[0].content
        assert "You are Acme's concierge." in system_prompt
        assert REFUND_CHUNK in system_prompt
        assert DEFAULT_INSTRUCTION not in system_prompt

    @pytest.mark.asyncio
    async def test_session_client_used_when_request_omits_it(
        self, test_async_db, make_service, add_document
    ) -> None:
        client_id = uuid.uuid4()
        await add_document([(REFUND_CHUNK, [1.0, 0.0, 0.0])], client_id=client_id)
        first = await make_service().process_message("Hello", client_id=str(client_id))

        second = await make_service().process_message(
            "refund please",
            session_id=str(first.session_id),
            session_token=first.session_token,
        )

        assert second.retrieval.tier == RetrievalTier.STRICT


class TestChatRejections:
    """Test suite for requests rejected before the model is called."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("message", [None, 42, "", "    "])
    async def test_invalid_message_has_no_side_effects(
        self, test_async_db, make_service, mock_chat_model, message
    ) -> None:
        service = make_service()

        with pytest.raises(ValidationError):
            await service.process_message(message)

        assert service.state == ChatState.ERRORED
        assert await count_rows(test_async_db, ChatSessionModel) == 0
        assert await count_rows(test_async_db, ChatMessageModel) == 0
        mock_chat_model.ainvoke.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_oversized_message_rejected(self, test_async_db, make_service) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await make_service(max_message_length=10).process_message("x" * 11)

        assert exc_info.value.public_message == "Message must be 10 characters or less"
        assert await count_rows(test_async_db, ChatSessionModel) == 0

    @pytest.mark.asyncio
    async def test_malformed_session_id_rejected(self, make_service) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await make_service().process_message("hi", session_id="not-a-uuid", session_token="x")

        assert exc_info.value.public_message == "Invalid session ID format"

    @pytest.mark.asyncio
    async def test_missing_token_rejected(self, test_async_db, make_service) -> None:
        first = await make_service().process_message("Hello")

        with pytest.raises(AuthenticationError) as exc_info:
            await make_service().process_message("again", session_id=str(first.session_id))

        assert exc_info.value.code == "SESSION_TOKEN_REQUIRED"
        assert await count_rows(test_async_db, ChatMessageModel) == 2

    @pytest.mark.asyncio
    async def test_tampered_token_rejected(self, test_async_db, make_service, mock_chat_model) -> None:
        first = await make_service().process_message("Hello")
        mock_chat_model.ainvoke.reset_mock()

        with pytest.raises(AuthenticationError) as exc_info:
            await make_service().process_message(
                "again",
                session_id=str(first.session_id),
                session_token="f" * 64,
            )

        assert exc_info.value.code == "INVALID_SESSION"
        assert exc_info.value.status_code == 401
        mock_chat_model.ainvoke.assert_not_awaited()
        assert await count_rows(test_async_db, ChatMessageModel) == 2

    @pytest.mark.asyncio
    async def test_unknown_session_rejected(self, make_service) -> None:
        with pytest.raises(AuthenticationError):
            await make_service().process_message(
                "hi", session_id=str(uuid.uuid4()), session_token="a" * 64
            )

    @pytest.mark.asyncio
    async def test_session_ceiling(self, test_async_db, make_service, mock_chat_model) -> None:
        """The fourth message of a session limited to three is refused without calling the model."""
        first = await make_service(max_requests_per_session=3).process_message("1")
        for text in ("2", "3"):
            await make_service(max_requests_per_session=3).process_message(
                text, session_id=str(first.session_id), session_token=first.session_token
            )
        mock_chat_model.ainvoke.reset_mock()

        with pytest.raises(SessionRateLimitError):
            await make_service(max_requests_per_session=3).process_message(
                "4", session_id=str(first.session_id), session_token=first.session_token
            )

        mock_chat_model.ainvoke.assert_not_awaited()
        session = await chat_session_crud.get_by_id(test_async_db, first.session_id)
        await test_async_db.refresh(session)
        assert session.message_count == 3

        other = await make_service(max_requests_per_session=3).process_message("new session")
        assert other.session_id != first.session_id

    @pytest.mark.asyncio
    async def test_address_ceiling(self, test_async_db, make_service) -> None:
        """Messages from every session of one address count toward its ceiling."""
        for _ in range(2):
            await make_service(max_requests_per_address=3).process_message(
                "hi", ip_address="192.0.2.77"
            )

        with pytest.raises(AddressRateLimitError):
            await make_service(max_requests_per_address=3).process_message(
                "hi", ip_address="192.0.2.77"
            )

        assert await count_rows(test_async_db, ChatSessionModel) == 2
        await make_service(max_requests_per_address=3).process_message(
            "hi", ip_address="192.0.2.78"
        )


class TestCompletionFailure:
    """Test suite for upstream model failures."""

    @pytest.mark.asyncio
    async def test_user_message_survives_completion_failure(
        self, test_async_db, make_service, mock_chat_model
    ) -> None:
        mock_chat_model.ainvoke.side_effect = RuntimeError("quota exceeded")
        service = make_service()

        with pytest.raises(CompletionError):
            await service.process_message("What is your refund policy?")

        assert service.state == ChatState.ERRORED
        result = await test_async_db.execute(select(ChatMessageModel))
        messages = result.scalars().all()
        assert [(m.role, m.content) for m in messages] == [
            (MessageRole.USER, "What is your refund policy?")
        ]
        assert await count_rows(test_async_db, KnowledgeGapModel) == 0


class TestTranscript:
    """Test suite for transcript retrieval."""

    @pytest.mark.asyncio
    async def test_transcript_requires_valid_token(self, make_service) -> None:
        first = await make_service().process_message("Hello")
        service = make_service()

        transcript = await service.get_transcript(str(first.session_id), first.session_token)

        assert [m.role for m in transcript] == [MessageRole.USER, MessageRole.ASSISTANT]
        with pytest.raises(AuthenticationError):
            await service.get_transcript(first.session_id, "0" * 64)
        with pytest.raises(AuthenticationError):
            await service.get_transcript(first.session_id, None)
