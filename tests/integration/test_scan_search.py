"""
Integration tests for the in-process chunk search backend.

System role: Verification of thresholding, ordering and knowledge base scoping
"""

import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import numpy as np
import pytest
from sqlalchemy import select

from knowledge_chat.boundary.db.CRUD.document_chunk_crud import document_chunk_crud
from knowledge_chat.boundary.db.models import DocumentChunkModel
from knowledge_chat.boundary.vdb import ChunkQuery, ChunkSearch, get_chunk_search
from knowledge_chat.boundary.vdb.scan_store import ScanChunkSearch


def query(embedding, client_id=None, threshold=0.5, count=5) -> ChunkQuery:
    return ChunkQuery(
        embedding=embedding,
        client_id=client_id,
        similarity_threshold=threshold,
        match_count=count,
    )


@pytest.mark.asyncio
async def test_threshold_and_ordering(test_async_db, add_document) -> None:
    await add_document(
        [
            ("Refunds are issued within 30 days.", [1.0, 0.0, 0.0]),
            ("Shipping takes a week.", [0.6, 0.8, 0.0]),
            ("Our office has a cat.", [0.0, 1.0, 0.0]),
        ]
    )
    search = ScanChunkSearch(test_async_db)

    matches = await search.search(query([1.0, 0.0, 0.0], threshold=0.5))

    assert [m.content for m in matches] == [
        "Refunds are issued within 30 days.",
        "Shipping takes a week.",
    ]
    assert matches[0].similarity == pytest.approx(1.0)
    assert matches[1].similarity == pytest.approx(0.6)
    assert matches[0].title == "Company Handbook"


@pytest.mark.asyncio
async def test_match_count_truncates(test_async_db, add_document) -> None:
    await add_document([(f"chunk {i}", [1.0, 0.0, 0.0]) for i in range(6)])
    search = ScanChunkSearch(test_async_db)

    matches = await search.search(query([1.0, 0.0, 0.0], threshold=0.3, count=5))

    assert len(matches) == 5


@pytest.mark.asyncio
async def test_scoped_to_active_shared_documents_of_client(test_async_db, add_document) -> None:
    client_id = uuid.uuid4()
    await add_document([("tenant chunk", [1.0, 0.0, 0.0])], client_id=client_id)
    await add_document([("other tenant chunk", [1.0, 0.0, 0.0])], client_id=uuid.uuid4())
    await add_document([("inactive chunk", [1.0, 0.0, 0.0])], client_id=client_id, is_active=False)
    await add_document([("shared chunk", [1.0, 0.0, 0.0])])
    search = ScanChunkSearch(test_async_db)

    tenant_matches = await search.search(query([1.0, 0.0, 0.0], client_id=client_id))
    shared_matches = await search.search(query([1.0, 0.0, 0.0]))

    assert [m.content for m in tenant_matches] == ["tenant chunk"]
    assert [m.content for m in shared_matches] == ["shared chunk"]


@pytest.mark.asyncio
async def test_skips_unembedded_and_mismatched_chunks(test_async_db, add_document) -> None:
    await add_document(
        [
            ("no embedding", None),
            ("wrong dimension", [1.0, 0.0]),
            ("good", [1.0, 0.0, 0.0]),
        ]
    )
    search = ScanChunkSearch(test_async_db)

    matches = await search.search(query([1.0, 0.0, 0.0], threshold=0.0))

    assert [m.content for m in matches] == ["good"]


@pytest.mark.asyncio
async def test_leading_chunks_in_chunk_order(test_async_db, add_document) -> None:
    await add_document([("first", None), ("second", None), ("third", None), ("fourth", None)])
    search = ScanChunkSearch(test_async_db)

    leading = await search.leading_chunks(None, 3)

    assert [m.content for m in leading] == ["first", "second", "third"]
    assert all(m.similarity == 0.0 for m in leading)


@pytest.mark.asyncio
async def test_factory_selects_backend(test_async_db) -> None:
    assert isinstance(get_chunk_search(test_async_db, "scan"), ScanChunkSearch)
    with pytest.raises(ValueError):
        get_chunk_search(test_async_db, "faiss")


@pytest.mark.asyncio
async def test_equal_scores_keep_chunk_id_order(test_async_db, add_document) -> None:
    await add_document([(f"tied {i}", [0.0, 1.0, 0.0]) for i in range(4)])
    search = ScanChunkSearch(test_async_db)
    result = await test_async_db.execute(
        select(DocumentChunkModel.content).order_by(DocumentChunkModel.id.asc())
    )
    id_order = list(result.scalars().all())

    first = await search.search(query([0.0, 1.0, 0.0], threshold=0.5))
    second = await search.search(query([0.0, 1.0, 0.0], threshold=0.5))

    assert [m.content for m in first] == id_order
    assert [m.content for m in second] == id_order


@pytest.mark.asyncio
async def test_scores_array_embeddings(test_async_db) -> None:
    """pgvector columns load as numpy arrays; they score like lists."""

    def chunk(content, embedding):
        return SimpleNamespace(id=uuid.uuid4(), content=content, embedding=embedding), "Doc"

    rows = [
        chunk("array chunk", np.array([1.0, 0.0, 0.0])),
        chunk("short array", np.array([1.0, 0.0])),
        chunk("missing", None),
    ]
    search = ScanChunkSearch(test_async_db)

    with patch.object(document_chunk_crud, "get_embedded_chunks", AsyncMock(return_value=rows)):
        matches = await search.search(query([1.0, 0.0, 0.0]))

    assert [m.content for m in matches] == ["array chunk"]
    assert isinstance(matches[0].similarity, float)
    assert matches[0].similarity == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_chunk_search_requires_search_implementation(test_async_db) -> None:
    with pytest.raises(TypeError):
        ChunkSearch(test_async_db)
