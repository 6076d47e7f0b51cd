"""
Vector search schemas.

Pydantic models for chunk similarity queries and their results. Shared by
every search backend so the retrieval engine never sees backend types.

Dependencies: pydantic
System role: Type definitions for vector operations
"""

import uuid

from pydantic import BaseModel, Field


class ChunkQuery(BaseModel):
    """Query parameters for a scoped chunk similarity search."""

    embedding: list[float] = Field(description="Query embedding vector")
    client_id: uuid.UUID | None = Field(
        default=None,
        description="Tenant scope; None searches the shared knowledge base",
    )
    similarity_threshold: float = Field(
        default=0.7,
        description="Minimum cosine similarity (0.0-1.0)",
        ge=0.0,
        le=1.0,
    )
    match_count: int = Field(default=3, description="Number of results to return", ge=1, le=100)


class ChunkMatch(BaseModel):
    """Single chunk returned by a search or fallback lookup."""

    content: str = Field(description="Chunk text content")
    title: str = Field(default="", description="Owning document title")
    similarity: float = Field(default=0.0, description="Cosine similarity, 0.0 for unscored chunks")
