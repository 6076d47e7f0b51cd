"""
Vector search boundary layer.

Provides the similarity-search primitive over stored chunk embeddings.
- PgVectorChunkSearch: Production search via the search_document_chunks database function
- ScanChunkSearch: In-process cosine scan for development and tests

Dependencies: sqlalchemy
System role: Vector search adapter for retrieval
"""

from knowledge_chat.boundary.vdb.base_store import ChunkSearch
from knowledge_chat.boundary.vdb.vector_schemas import ChunkMatch, ChunkQuery
from knowledge_chat.boundary.vdb.vector_store_factory import get_chunk_search

__all__ = [
    "ChunkSearch",
    "ChunkMatch",
    "ChunkQuery",
    "get_chunk_search",
]
