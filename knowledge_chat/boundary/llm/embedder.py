"""
Query embedding client.

Wraps GoogleGenerativeAIEmbeddings with a fixed output dimensionality and
a bounded timeout. Every failure is raised as EmbeddingError so the
retrieval engine can degrade to its fallback tier.

Dependencies: langchain_google_genai, knowledge_chat.core.exceptions
System role: External embedding service adapter
"""

import asyncio
import logging

from dotenv import load_dotenv
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from knowledge_chat.core.exceptions import EmbeddingError

load_dotenv()
logger = logging.getLogger(__name__)


class QueryEmbedder:
    """
    Embeds visitor questions for similarity search.

    The embedding dimension must match the stored chunk embeddings, so it is
    requested explicitly on every call and checked on the way back.
    """

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        dimension: int = 1024,
        timeout_seconds: float = 10.0,
        embeddings: GoogleGenerativeAIEmbeddings | None = None,
    ) -> None:
        """
        Initialize the embedder.

        Args:
            model: Google embedding model ID
            dimension: Output dimensionality for every query vector
            timeout_seconds: Upper bound for one embedding call
            embeddings: Pre-built client (tests inject fakes here)
        """
        self._model = model
        self._dimension = dimension
        self._timeout = timeout_seconds
        self._embeddings = embeddings or GoogleGenerativeAIEmbeddings(model=model)
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, dimension={dimension}"
        )

    @property
    def dimension(self) -> int:
        return self._dimension

    async def embed(self, text: str) -> list[float]:
        """
        Embed a single question.

        Args:
            text: Question text

        Returns:
            Embedding vector of the configured dimension

        Raises:
            EmbeddingError: On timeout, upstream failure, or a dimension mismatch
        """
        try:
            vector = await asyncio.wait_for(
                self._embeddings.aembed_query(text, output_dimensionality=self._dimension),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError as e:
            raise EmbeddingError(
                "Embedding request timed out",
                details={"model": self._model, "timeout_seconds": self._timeout},
            ) from e
        except Exception as e:
            raise EmbeddingError(
                "Embedding request failed",
                details={"model": self._model, "error_type": type(e).__name__, "error": str(e)},
            ) from e

        if len(vector) != self._dimension:
            raise EmbeddingError(
                "Embedding dimension mismatch",
                details={"expected": self._dimension, "actual": len(vector)},
            )
        return [float(value) for value in vector]
