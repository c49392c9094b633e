"""Context retriever — question → nearest chunks → labelled context text.

Usage::

    retriever = ContextRetriever(embedder, store, default_k=5)
    context = await retriever.retrieve("What happened to fees?")
    print(context.text)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from corpus_rag.errors import EmbeddingFailure
from corpus_rag.retrieval.models import MetadataFilter, RetrievalContext, RetrievedChunk

if TYPE_CHECKING:
    from corpus_rag.ingestion.embedder import ChunkEmbedder
    from corpus_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)

NO_CONTEXT = "No relevant documents found."
"""Context text used when the index returns nothing; never an empty string."""


def build_context(chunks: list[RetrievedChunk]) -> str:
    """Join the labelled blocks of *chunks* in order, or return :data:`NO_CONTEXT`."""
    text = "\n".join(chunk.context_block() for chunk in chunks)
    if not text.strip():
        return NO_CONTEXT
    return text


class ContextRetriever:
    """Embeds a question and assembles context from the nearest stored chunks.

    Parameters
    ----------
    embedder:
        Used for the single query embedding.
    store:
        The vector index to search.
    default_k:
        Number of chunks retrieved when :meth:`retrieve` gets no *k*.
    """

    def __init__(
        self,
        embedder: ChunkEmbedder,
        store: VectorStoreBase,
        *,
        default_k: int = 5,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self.default_k = default_k

    async def retrieve(
        self,
        question: str,
        *,
        k: int | None = None,
        filters: list[MetadataFilter] | None = None,
    ) -> RetrievalContext:
        """Return the *k* nearest chunks for *question* and their context text.

        Raises
        ------
        ValueError
            If *question* is blank or *k* is not positive.
        EmbeddingFailure
            If the question could not be embedded.
        """
        if not question or not question.strip():
            raise ValueError("question must be a non-empty string")
        k = k if k is not None else self.default_k
        if k <= 0:
            raise ValueError(f"k must be positive, got {k}")

        vector = await self._embedder.embed_one(question)
        if not vector:
            raise EmbeddingFailure("Failed to embed question")

        hits = await self._store.similarity_search(vector, k=k, filters=filters)
        chunks = [RetrievedChunk.from_hit(hit) for hit in hits[:k]]
        logger.info("Retrieved %d chunk(s) for %.80r", len(chunks), question)
        return RetrievalContext(chunks=chunks, text=build_context(chunks))
