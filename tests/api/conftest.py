"""
API test fixtures.

Provides: application instance and TestClient with the chat service overridden
Dependencies: fastapi
System role: HTTP layer test infrastructure
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from knowledge_chat.api.deps import get_chat_service
from knowledge_chat.api.main import create_app
from knowledge_chat.application.services.chat_service import ChatTurnResult
from knowledge_chat.core.retriever import RetrievalResult, RetrievalTier


@pytest.fixture
def app():
    """Fresh application per test so dependency overrides never leak."""
    return create_app()


@pytest.fixture
def mock_chat_service() -> MagicMock:
    """Chat service returning a fixed successful turn."""
    service = MagicMock()
    service.process_message = AsyncMock(
        return_value=ChatTurnResult(
            message="Refunds are issued within 30 days.",
            session_id=uuid.UUID("8a6e0804-2bd0-4672-b79d-d97027f9071a"),
            session_token="ab" * 32,
            retrieval=RetrievalResult(
                context="", has_knowledge_gap=False, tier=RetrievalTier.STRICT
            ),
        )
    )
    service.get_transcript = AsyncMock(return_value=[])
    return service


@pytest.fixture
def client(app, mock_chat_service) -> TestClient:
    """TestClient whose chat endpoint uses the mocked service."""
    app.dependency_overrides[get_chat_service] = lambda: mock_chat_service
    return TestClient(app, raise_server_exceptions=False)
