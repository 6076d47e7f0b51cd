"""
Shared test fixtures and configuration for entire test suite.

Provides: in-memory database, knowledge base seeding, fake model services
Dependencies: pytest, sqlalchemy, aiosqlite
System role: Test infrastructure and fixture management
"""

import uuid
from unittest.mock import AsyncMock

import pytest
from langchain_core.messages import AIMessage

from knowledge_chat.configs.chat import ChatSettings
from knowledge_chat.configs.llm import LLMSettings

EMBEDDING_DIMENSION = 3


class FakeEmbeddings:
    """
    Stand-in for GoogleGenerativeAIEmbeddings.

    Returns the vector of the first keyword found in the text, else the default.
    """

    def __init__(self, vectors: dict[str, list[float]] | None = None, default=None):
        self.vectors = vectors or {}
        self.default = default or [0.0, 0.0, 1.0]
        self.calls: list[str] = []

    async def aembed_query(self, text, output_dimensionality=None, **kwargs):
        self.calls.append(text)
        lowered = text.lower()
        for keyword, vector in self.vectors.items():
            if keyword in lowered:
                return vector
        return self.default


@pytest.fixture
async def test_async_db():
    """
    Create in-memory SQLite async database for testing.

    Yields:
        AsyncSession: Test database session with cleanup (lazy imported to avoid settings issues)
    """
    from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
    from sqlalchemy.pool import StaticPool
    from knowledge_chat.boundary.db.base import Base
    from knowledge_chat.boundary.db import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def chat_settings() -> ChatSettings:
    """Chat policy with the production defaults."""
    return ChatSettings(
        max_message_length=1000,
        session_ttl_days=30,
        rate_limit_window_seconds=3600,
        max_requests_per_session=100,
        max_requests_per_address=300,
        rate_limit_fail_open=True,
        history_window=20,
        admin_api_key=None,
    )


@pytest.fixture
def llm_settings() -> LLMSettings:
    """Single-attempt completion settings so failures surface immediately."""
    return LLMSettings(
        google_api_key="test-key",
        model="gemini-test",
        max_attempts=1,
        retry_initial_wait=0,
        retry_max_wait=0,
        timeout_seconds=5,
    )


@pytest.fixture
def fake_embeddings() -> FakeEmbeddings:
    """Embeddings keyed on words used across the test suite."""
    return FakeEmbeddings(
        vectors={
            "refund": [1.0, 0.0, 0.0],
            "shipping": [0.6, 0.8, 0.0],
            "weather": [0.0, 1.0, 0.0],
        },
    )


@pytest.fixture
def mock_chat_model() -> AsyncMock:
    """Chat model whose ainvoke returns a fixed assistant reply."""
    model = AsyncMock()
    model.ainvoke = AsyncMock(return_value=AIMessage(content="Here is what I found."))
    return model


async def seed_document(
    db,
    chunks: list[tuple[str, list[float] | None]],
    client_id: uuid.UUID | None = None,
    title: str = "Company Handbook",
    is_active: bool = True,
    session_id: uuid.UUID | None = None,
):
    """
    Store a document and its chunks, returning the document.

    Args:
        db: Async database session
        chunks: (content, embedding) pairs in chunk order
        client_id: Owning tenant
        title: Document title
        is_active: Active flag
        session_id: Session scope for ephemeral documents
    """
    from knowledge_chat.boundary.db.models import DocumentChunkModel, DocumentModel

    document = DocumentModel(
        client_id=client_id,
        title=title,
        file_name=f"{title.lower().replace(' ', '_')}.pdf",
        is_active=is_active,
        session_id=session_id,
    )
    db.add(document)
    await db.flush()
    for index, (content, embedding) in enumerate(chunks):
        db.add(
            DocumentChunkModel(
                document_id=document.id,
                chunk_index=index,
                content=content,
                embedding=embedding,
            )
        )
    await db.commit()
    return document


@pytest.fixture
def add_document(test_async_db):
    """Async helper that seeds a document into the test database."""

    async def _add(chunks, **kwargs):
        return await seed_document(test_async_db, chunks, **kwargs)

    return _add


@pytest.fixture
def embedder(fake_embeddings: FakeEmbeddings):
    """QueryEmbedder backed by FakeEmbeddings."""
    from knowledge_chat.boundary.llm.embedder import QueryEmbedder

    return QueryEmbedder(
        model="models/test-embedding",
        dimension=EMBEDDING_DIMENSION,
        timeout_seconds=1.0,
        embeddings=fake_embeddings,
    )


@pytest.fixture
def completion_client(llm_settings: LLMSettings, mock_chat_model: AsyncMock):
    """CompletionClient backed by the mocked chat model."""
    from knowledge_chat.boundary.llm.completion_client import CompletionClient

    return CompletionClient(llm_settings, model=mock_chat_model)
