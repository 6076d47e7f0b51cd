"""
Tiered knowledge base retrieval.

Turns a visitor question into a short, paraphrased context block plus a
knowledge-gap flag. Similarity search is attempted with progressively lower
thresholds so that some context is usually found; anything below the strict
tier is flagged as a gap for human follow-up.

Tier order:
    overview       generic "who are you" questions, leading chunks, no gap
    strict         threshold 0.7, top 3, no gap
    relaxed        threshold 0.5, top 5, gap
    ultra_relaxed  threshold 0.3, top 5, gap
    fallback       leading 3 chunks regardless of relevance, gap
    none           nothing stored at all, empty context, gap

Embedding and search failures degrade to the fallback tier; retrieval never
raises into the chat turn.

Dependencies: knowledge_chat.boundary.vdb, knowledge_chat.boundary.llm
System role: RAG retrieval business logic
"""

import enum
import logging
import re
import uuid
from dataclasses import dataclass

from knowledge_chat.boundary.llm.embedder import QueryEmbedder
from knowledge_chat.boundary.vdb import ChunkMatch, ChunkQuery, ChunkSearch
from knowledge_chat.core.exceptions import EmbeddingError, VectorStoreError

logger = logging.getLogger(__name__)


class RetrievalTier(str, enum.Enum):
    """Tier that produced the retrieval context."""

    OVERVIEW = "overview"
    STRICT = "strict"
    RELAXED = "relaxed"
    ULTRA_RELAXED = "ultra_relaxed"
    FALLBACK = "fallback"
    NONE = "none"


@dataclass(frozen=True)
class SearchTier:
    """One thresholded similarity search attempt."""

    tier: RetrievalTier
    similarity_threshold: float
    match_count: int
    knowledge_gap: bool


SEARCH_TIERS: tuple[SearchTier, ...] = (
    SearchTier(RetrievalTier.STRICT, 0.7, 3, knowledge_gap=False),
    SearchTier(RetrievalTier.RELAXED, 0.5, 5, knowledge_gap=True),
    SearchTier(RetrievalTier.ULTRA_RELAXED, 0.3, 5, knowledge_gap=True),
)

OVERVIEW_CHUNK_COUNT = 3
FALLBACK_CHUNK_COUNT = 3

PARAPHRASE_MAX_LINES = 3
PARAPHRASE_MAX_CHARS = 300

CONTEXT_HEADER = "The knowledge base provides the following information:\n"

# Matched as whole words; the rest of the clause may only hold filler words
OVERVIEW_PATTERNS: tuple[str, ...] = (
    "what do you know",
    "what can you do",
    "tell me about yourself",
    "who are you",
    "что ты знаешь",
    "что знаешь",
    "расскажи о себе",
    "что ты умеешь",
    "что умеешь",
    "кто ты",
    "о чем ты",
)

OVERVIEW_FILLER_WORDS: frozenset[str] = frozenset(
    {
        "please", "here", "exactly", "then", "again",
        "пожалуйста", "вообще", "тут", "здесь", "знаешь", "можешь", "рассказать",
    }
)

_OVERVIEW_REGEXES = tuple(
    re.compile(rf"\b{re.escape(pattern)}\b") for pattern in OVERVIEW_PATTERNS
)
_CLAUSE_END = re.compile(r"[.?!;\n]")
_WORD = re.compile(r"\w+")


@dataclass(frozen=True)
class RetrievalResult:
    """
    Outcome of one retrieval.

    Attributes:
        context: Paraphrased context block, empty when nothing was found
        has_knowledge_gap: True unless the overview or strict tier answered
        tier: Tier that produced the context
        best_similarity: Highest similarity among the selected chunks (diagnostic)
        chunk_count: Number of chunks selected
    """

    context: str
    has_knowledge_gap: bool
    tier: RetrievalTier
    best_similarity: float = 0.0
    chunk_count: int = 0


def is_overview_question(question: str) -> bool:
    """Whether the question asks the assistant to describe itself."""
    lowered = question.lower()
    for regex in _OVERVIEW_REGEXES:
        for match in regex.finditer(lowered):
            clause_rest = _CLAUSE_END.split(lowered[match.end():], maxsplit=1)[0]
            if all(word in OVERVIEW_FILLER_WORDS for word in _WORD.findall(clause_rest)):
                return True
    return False


def paraphrase_chunk(content: str) -> str:
    """
    Reduce a chunk to its first three non-empty lines, joined and truncated.

    Keeps any single answer from reproducing a stored document verbatim.

    Args:
        content: Raw chunk text

    Returns:
        At most PARAPHRASE_MAX_CHARS characters
    """
    lines = [line for line in content.split("\n") if line.strip()]
    return " ".join(lines[:PARAPHRASE_MAX_LINES])[:PARAPHRASE_MAX_CHARS]


def build_context(matches: list[ChunkMatch]) -> str:
    """
    Render selected chunks as the prompt context block.

    Document titles are deliberately left out.

    Args:
        matches: Selected chunks

    Returns:
        Context block, or an empty string when no chunk has text
    """
    parts = [part for part in (paraphrase_chunk(m.content) for m in matches) if part]
    if not parts:
        return ""
    return CONTEXT_HEADER + "\n\n".join(parts)


class RetrievalEngine:
    """
    Tiered retrieval over one client's knowledge base.

    Stateless apart from its collaborators; identical inputs over an
    unchanged chunk set always select the same tier and context.
    """

    def __init__(self, embedder: QueryEmbedder, chunk_search: ChunkSearch) -> None:
        """
        Initialize retrieval engine.

        Args:
            embedder: Question embedding client
            chunk_search: Similarity search and leading-chunk lookup
        """
        self._embedder = embedder
        self._search = chunk_search

    async def retrieve(self, question: str, client_id: uuid.UUID | None = None) -> RetrievalResult:
        """
        Select context for a question.

        Args:
            question: Trimmed visitor question
            client_id: Tenant scope (None for the shared knowledge base)

        Returns:
            RetrievalResult; never raises for embedding or search failures
        """
        if is_overview_question(question):
            try:
                chunks = await self._search.leading_chunks(client_id, OVERVIEW_CHUNK_COUNT)
            except VectorStoreError as e:
                logger.warning(f"{__name__}:retrieve - Overview lookup failed: {e}")
                chunks = []
            if chunks:
                return self._result(chunks, RetrievalTier.OVERVIEW, has_knowledge_gap=False)

        try:
            embedding = await self._embedder.embed(question)
            for search_tier in SEARCH_TIERS:
                matches = await self._search.search(
                    ChunkQuery(
                        embedding=embedding,
                        client_id=client_id,
                        similarity_threshold=search_tier.similarity_threshold,
                        match_count=search_tier.match_count,
                    )
                )
                logger.info(
                    f"{__name__}:retrieve - {search_tier.tier.value} search "
                    f"({search_tier.similarity_threshold}) found {len(matches)} chunks"
                )
                if matches:
                    return self._result(matches, search_tier.tier, search_tier.knowledge_gap)
        except (EmbeddingError, VectorStoreError) as e:
            logger.warning(f"{__name__}:retrieve - Degrading to fallback tier: {e}")

        return await self._fallback(client_id)

    async def _fallback(self, client_id: uuid.UUID | None) -> RetrievalResult:
        """Leading chunks regardless of relevance, or an empty result."""
        try:
            chunks = await self._search.leading_chunks(client_id, FALLBACK_CHUNK_COUNT)
        except VectorStoreError as e:
            logger.error(f"{__name__}:_fallback - Fallback lookup failed: {e}")
            chunks = []

        if not chunks:
            logger.info(f"{__name__}:_fallback - No context found in knowledge base")
            return RetrievalResult(context="", has_knowledge_gap=True, tier=RetrievalTier.NONE)
        return self._result(chunks, RetrievalTier.FALLBACK, has_knowledge_gap=True)

    @staticmethod
    def _result(
        matches: list[ChunkMatch],
        tier: RetrievalTier,
        has_knowledge_gap: bool,
    ) -> RetrievalResult:
        return RetrievalResult(
            context=build_context(matches),
            has_knowledge_gap=has_knowledge_gap,
            tier=tier,
            best_similarity=max(m.similarity for m in matches),
            chunk_count=len(matches),
        )
