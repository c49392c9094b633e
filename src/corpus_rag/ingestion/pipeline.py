"""Ingestion pipeline — chunk → embed → identify → upsert.

Two entry points share the same core:

* :meth:`IngestionPipeline.ingest_document` — one freshly uploaded file.
* :meth:`IngestionPipeline.ingest_corpus` — every (optionally filtered)
  document below the corpus root, used for bulk rebuilds.

The vector index is written exactly once per call, after chunking and
embedding have finished, so a failure at any earlier stage leaves the
index untouched.  Because IDs are derived from ``filename|category|
chunk_index``, re-ingesting a document with unchanged chunk boundaries
overwrites its records.  Chunks left over from a previous run with
*different* chunk parameters are not removed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from corpus_rag.errors import (
    EmbeddingFailure,
    IndexWriteInvariantViolation,
    NoChunksCreated,
    NoMatchingDocuments,
)
from corpus_rag.ingestion.chunker import chunk_documents
from corpus_rag.ingestion.identity import chunk_id
from corpus_rag.ingestion.loader import load_documents

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from corpus_rag.ingestion.embedder import ChunkEmbedder
    from corpus_rag.ingestion.models import Document, EmbeddedChunk
    from corpus_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionResult:
    """Counts reported by one ingestion call.

    Attributes
    ----------
    documents:
        Documents that went into chunking.
    chunks:
        Chunks produced.
    stored:
        Records upserted into the vector index.
    skipped:
        Chunks dropped because they could not be embedded.
    """

    documents: int
    chunks: int
    stored: int
    skipped: int


@dataclass(frozen=True)
class IndexPayload:
    """Parallel arrays for a single ``VectorStoreBase.upsert`` call."""

    ids: list[str]
    embeddings: list[list[float]]
    documents: list[str]
    metadatas: list[dict[str, Any]]

    def validate(self) -> None:
        """Raise :class:`IndexWriteInvariantViolation` unless all arrays are equal and non-empty."""
        lengths = {
            "ids": len(self.ids),
            "embeddings": len(self.embeddings),
            "documents": len(self.documents),
            "metadatas": len(self.metadatas),
        }
        if not self.ids or len(set(lengths.values())) != 1:
            raise IndexWriteInvariantViolation(f"Index data arrays mismatch or empty: {lengths}")


def build_index_payload(embedded: Sequence[EmbeddedChunk], model_tag: str) -> IndexPayload:
    """Turn embedded chunks into the four parallel arrays the index expects."""
    payload = IndexPayload(ids=[], embeddings=[], documents=[], metadatas=[])
    for chunk in embedded:
        if not chunk.embedding:
            continue
        payload.ids.append(chunk_id(chunk))
        payload.embeddings.append(chunk.embedding)
        payload.documents.append(chunk.content)
        payload.metadatas.append(
            {
                "filename": chunk.filename,
                "category": chunk.category,
                "chunk_index": chunk.chunk_index,
                "embedding_model": model_tag,
            }
        )
    return payload


class IngestionPipeline:
    """Orchestrates chunking, embedding and indexing of documents.

    Parameters
    ----------
    embedder:
        Batched embedder for chunk texts.
    store:
        Target vector index.
    chunk_length / chunk_overlap:
        Default chunking parameters, overridable per call.
    model_tag:
        Embedding model name recorded in every record's metadata.
    """

    def __init__(
        self,
        embedder: ChunkEmbedder,
        store: VectorStoreBase,
        *,
        chunk_length: int = 500,
        chunk_overlap: int = 50,
        model_tag: str = "unknown",
    ) -> None:
        self._embedder = embedder
        self._store = store
        self.chunk_length = chunk_length
        self.chunk_overlap = chunk_overlap
        self.model_tag = model_tag

    async def ingest(
        self,
        documents: Sequence[Document],
        *,
        chunk_length: int | None = None,
        chunk_overlap: int | None = None,
    ) -> IngestionResult:
        """Chunk, embed and upsert *documents* in a single index write.

        Raises
        ------
        NoChunksCreated
            If the documents produced no chunks.
        EmbeddingFailure
            If none of the chunks could be embedded.
        IndexWriteInvariantViolation
            If the prepared arrays are empty or misaligned.
        """
        size = chunk_length if chunk_length is not None else self.chunk_length
        overlap = chunk_overlap if chunk_overlap is not None else self.chunk_overlap

        chunks = chunk_documents(documents, size, overlap)
        logger.info(
            "Produced %d chunks from %d documents (size=%d, overlap=%d)",
            len(chunks),
            len(documents),
            size,
            overlap,
        )
        if not chunks:
            raise NoChunksCreated("No chunks could be created from the given documents")

        report = await self._embedder.embed_batch(chunks)
        if not report.embedded:
            raise EmbeddingFailure(f"All {len(chunks)} chunks failed to embed")

        payload = build_index_payload(report.embedded, self.model_tag)
        payload.validate()
        await self._store.upsert(
            payload.ids,
            payload.embeddings,
            payload.documents,
            payload.metadatas,
        )
        logger.info("Saved %d chunks to the vector index", len(payload.ids))

        return IngestionResult(
            documents=len(documents),
            chunks=len(chunks),
            stored=len(payload.ids),
            skipped=report.failed_count,
        )

    async def ingest_document(
        self,
        document: Document,
        *,
        chunk_length: int | None = None,
        chunk_overlap: int | None = None,
    ) -> IngestionResult:
        """Ingest a single document (incremental upload)."""
        return await self.ingest([document], chunk_length=chunk_length, chunk_overlap=chunk_overlap)

    async def ingest_corpus(
        self,
        root: str | Path,
        *,
        category: str | None = None,
        filename: str | None = None,
        chunk_length: int | None = None,
        chunk_overlap: int | None = None,
    ) -> IngestionResult:
        """Reload documents under *root* (optionally filtered) and re-ingest them.

        Raises
        ------
        NoMatchingDocuments
            If the filters match no non-empty document.
        """
        documents = await load_documents(root, category=category, filename=filename)
        if not documents:
            raise NoMatchingDocuments("No matching documents found")
        logger.info("Loaded %d documents from %s", len(documents), root)
        return await self.ingest(documents, chunk_length=chunk_length, chunk_overlap=chunk_overlap)
