"""
Document and document chunk ORM models.

Documents and their embedded chunks are written by the upload pipeline;
the chat endpoint only reads them.

Dependencies: sqlalchemy, pgvector, knowledge_chat.boundary.db.base
System role: Knowledge base storage read by retrieval
"""

import uuid

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON, Boolean, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from knowledge_chat.boundary.db.base import Base, TimestampMixin, UUIDMixin
from knowledge_chat.configs import get_settings

EMBEDDING_DIMENSION = get_settings().vector_store.embedding_dimension


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Knowledge base document.

    Attributes:
        client_id: Owning tenant (None for the shared knowledge base)
        title: Display title, never shown to chat visitors
        file_name: Original upload name
        is_active: Inactive documents are excluded from retrieval
        session_id: Set for ephemeral documents uploaded inside one chat
        chunks: Embedded chunks (cascade delete)
    """

    __tablename__ = "documents"

    client_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    session_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("chat_sessions.id", ondelete="CASCADE"),
        nullable=True,
    )

    chunks = relationship(
        "DocumentChunkModel",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentChunkModel.chunk_index",
    )


class DocumentChunkModel(Base, UUIDMixin, TimestampMixin):
    """
    Embedded slice of a document.

    The embedding is a pgvector column on PostgreSQL and a JSON float array
    on SQLite, where only the scan search backend is available.

    Attributes:
        document_id: Parent document
        chunk_index: Position within the document, starting at 0
        content: Chunk text
        embedding: Fixed-dimension embedding vector
    """

    __tablename__ = "document_chunks"
    __table_args__ = (UniqueConstraint("document_id", "chunk_index"),)

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float] | None] = mapped_column(
        Vector(EMBEDDING_DIMENSION).with_variant(JSON(none_as_null=True), "sqlite"),
        nullable=True,
    )

    document = relationship("DocumentModel", back_populates="chunks")
