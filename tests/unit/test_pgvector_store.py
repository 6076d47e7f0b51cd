"""
Unit tests for the pgvector chunk search backend.

Uses a mocked session, so only statement construction and error handling
are checked here; the database function itself runs on PostgreSQL only.

System role: Verification of the production similarity-search adapter
"""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest
from pgvector.sqlalchemy import Vector
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable

from knowledge_chat.boundary.db.models import DocumentChunkModel
from knowledge_chat.boundary.vdb import ChunkQuery
from knowledge_chat.boundary.vdb.pgvector_store import PgVectorChunkSearch, build_search_statement
from knowledge_chat.core.exceptions import VectorStoreError


@pytest.fixture
def mock_db() -> AsyncMock:
    """Session whose execute returns two rows from search_document_chunks."""
    result = MagicMock()
    result.mappings.return_value.all.return_value = [
        {"content": "Refunds within 30 days.", "title": "Policy", "similarity": 0.91},
        {"content": "Shipping is free.", "title": None, "similarity": None},
    ]
    db = AsyncMock()
    db.execute = AsyncMock(return_value=result)
    return db


def make_query(client_id=None) -> ChunkQuery:
    return ChunkQuery(
        embedding=[1.0, 0.0, 0.0],
        client_id=client_id,
        similarity_threshold=0.7,
        match_count=3,
    )


def test_query_embedding_is_a_vector_bind_parameter() -> None:
    compiled = build_search_statement(3).compile(dialect=postgresql.dialect())

    bind_type = compiled.binds["query_embedding"].type
    assert isinstance(bind_type, Vector)
    assert bind_type.dim == 3
    assert "CAST" not in str(compiled)


def test_embedding_column_is_vector_on_postgres_and_json_on_sqlite() -> None:
    table = DocumentChunkModel.__table__

    assert "VECTOR(" in str(CreateTable(table).compile(dialect=postgresql.dialect()))
    assert "JSON" in str(CreateTable(table).compile(dialect=sqlite.dialect()))


class TestPgVectorChunkSearch:
    """Test suite for PgVectorChunkSearch.search."""

    @pytest.mark.asyncio
    async def test_passes_raw_embedding_and_filters(self, mock_db: AsyncMock) -> None:
        client_id = uuid.uuid4()

        matches = await PgVectorChunkSearch(mock_db).search(make_query(client_id))

        statement, params = mock_db.execute.await_args.args
        assert params == {
            "query_embedding": [1.0, 0.0, 0.0],
            "client_id_filter": client_id,
            "similarity_threshold": 0.7,
            "match_count": 3,
        }
        assert "search_document_chunks" in str(statement)
        assert [m.content for m in matches] == ["Refunds within 30 days.", "Shipping is free."]
        assert matches[0].similarity == pytest.approx(0.91)
        assert matches[1].title == ""
        assert matches[1].similarity == 0.0

    @pytest.mark.asyncio
    async def test_database_error_becomes_vector_store_error(self, mock_db: AsyncMock) -> None:
        mock_db.execute.side_effect = SQLAlchemyError("function does not exist")

        with pytest.raises(VectorStoreError) as exc_info:
            await PgVectorChunkSearch(mock_db).search(make_query())

        assert exc_info.value.details["operation"] == "search"
        mock_db.rollback.assert_awaited_once()
