"""Batched, failure-tolerant embedding of chunks."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from langchain_huggingface import HuggingFaceEmbeddings

from corpus_rag.config import settings
from corpus_rag.ingestion.models import EmbeddedChunk

if TYPE_CHECKING:
    from collections.abc import Sequence

    from langchain_core.embeddings import Embeddings

    from corpus_rag.ingestion.models import Chunk

logger = logging.getLogger(__name__)


def get_embedding_function(model_name: str = settings.embedding_model) -> HuggingFaceEmbeddings:
    """Return the configured sentence-transformer embedding function.

    Vectors are mean-pooled (the sentence-transformers default for MiniLM
    models) and L2-normalised.
    """
    return HuggingFaceEmbeddings(
        model_name=model_name,
        encode_kwargs={"normalize_embeddings": True},
    )


@dataclass
class EmbeddingReport:
    """Outcome of :meth:`ChunkEmbedder.embed_batch`.

    Attributes
    ----------
    embedded:
        Chunks that received a vector, in input order.
    failed:
        Chunks dropped because the provider raised, returned nothing, or
        returned a vector of the wrong dimension.
    """

    embedded: list[EmbeddedChunk] = field(default_factory=list)
    failed: list[Chunk] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


class ChunkEmbedder:
    """Applies an embedding provider to many chunks, best effort.

    Parameters
    ----------
    embeddings:
        Any LangChain :class:`~langchain_core.embeddings.Embeddings`.
    batch_size:
        Number of chunks embedded concurrently.  Batches run one after
        the other, so at most *batch_size* provider calls are in flight.
    """

    def __init__(self, embeddings: Embeddings, *, batch_size: int = settings.embed_batch_size) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self._embeddings = embeddings
        self.batch_size = batch_size

    async def embed_one(self, text: str) -> list[float] | None:
        """Embed a single text, returning ``None`` when no usable vector came back."""
        try:
            vector = await self._embeddings.aembed_query(text)
        except Exception:
            logger.exception("Embedding failed for text %.80r", text)
            return None
        if vector is None or len(vector) == 0:
            logger.warning("Embedding provider returned an empty vector for %.80r", text)
            return None
        return [float(x) for x in vector]

    async def embed_batch(self, chunks: Sequence[Chunk]) -> EmbeddingReport:
        """Embed *chunks*, dropping (and recording) the ones that fail."""
        report = EmbeddingReport()
        dim: int | None = None
        t0 = time.monotonic()

        for start in range(0, len(chunks), self.batch_size):
            batch = chunks[start : start + self.batch_size]
            vectors = await asyncio.gather(*(self.embed_one(c.content) for c in batch))

            for chunk, vector in zip(batch, vectors):
                if vector is None:
                    report.failed.append(chunk)
                    continue
                if dim is None:
                    dim = len(vector)
                elif len(vector) != dim:
                    logger.warning(
                        "Dropping %s#%d: embedding dim %d != %d",
                        chunk.filename,
                        chunk.chunk_index,
                        len(vector),
                        dim,
                    )
                    report.failed.append(chunk)
                    continue
                report.embedded.append(EmbeddedChunk(**chunk.model_dump(), embedding=vector))

            logger.debug("  embedded %d / %d", start + len(batch), len(chunks))

        if report.failed:
            logger.warning(
                "Skipped %d of %d chunks that could not be embedded",
                report.failed_count,
                len(chunks),
            )
        logger.info(
            "Embedded %d chunks (dim=%s) in %.1fs",
            len(report.embedded),
            dim,
            time.monotonic() - t0,
        )
        return report
