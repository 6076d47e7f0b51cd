"""
Vector store configuration settings.

Selects the similarity-search primitive over stored chunk embeddings and
configures the query embedding model.

Dependencies: pydantic, pydantic_settings
System role: Retrieval backend configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_chat.configs.base import BaseSettings


class VectorStoreSettings(BaseSettings):
    """Vector store configuration (scan for local dev, pgvector for production)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VECTOR_STORE_",
        case_sensitive=False,
        extra="ignore",
    )

    store_type: str = Field(
        default="pgvector",
        description="Similarity search backend: 'pgvector' (database function) or 'scan' (in-process cosine)",
    )
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google embedding model ID used for query embeddings",
    )
    embedding_dimension: int = Field(
        default=1024,
        description="Embedding vector dimension, must match the stored chunk embeddings",
    )
    embedding_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single query embedding call",
    )
