"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

import chromadb

from corpus_rag.config import settings
from corpus_rag.retrieval.base import VectorStoreBase
from corpus_rag.retrieval.models import MetadataFilter

logger = logging.getLogger(__name__)


def _build_chroma_where(filters: list[MetadataFilter]) -> dict[str, Any] | None:
    """Convert equality :class:`MetadataFilter` objects to a Chroma ``where`` clause."""
    if not filters:
        return None

    clauses: list[dict[str, Any]] = []
    for f in filters:
        if f.operator != "eq":
            raise ValueError(f"Unsupported filter operator: {f.operator!r}")
        clauses.append({f.field: {"$eq": f.value}})

    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def make_client(
    *,
    host: str = settings.chroma_host,
    port: int = settings.chroma_port,
    path: str = settings.chroma_path,
) -> Any:
    """Return a Chroma client: embedded ``PersistentClient`` if *path* is set, else ``HttpClient``."""
    if path:
        logger.info("Using embedded Chroma at %s", path)
        return chromadb.PersistentClient(path=path)
    logger.info("Using Chroma server at %s:%d", host, port)
    return chromadb.HttpClient(host=host, port=port)


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Embeddings are always computed by the caller; the collection is
    created without an embedding function.  Blocking client calls run in
    a worker thread.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    client:
        An existing Chroma client.  Built from settings when omitted.
    distance_metric:
        ``cosine`` | ``l2`` | ``ip`` — only used when the collection is
        first created.
    upsert_batch_size:
        Max records per upsert request.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        client: Any = None,
        distance_metric: str = "cosine",
        upsert_batch_size: int = settings.upsert_batch_size,
    ) -> None:
        super().__init__(collection_name)
        self._client = client if client is not None else make_client()
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": distance_metric},
            embedding_function=None,
        )
        self.upsert_batch_size = upsert_batch_size

    # -- VectorStoreBase overrides --------------------------------------------

    async def upsert(
        self,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[dict[str, Any]],
    ) -> None:
        for start in range(0, len(ids), self.upsert_batch_size):
            end = start + self.upsert_batch_size
            await asyncio.to_thread(
                self._collection.upsert,
                ids=list(ids[start:end]),
                embeddings=[list(e) for e in embeddings[start:end]],
                documents=list(documents[start:end]),
                metadatas=list(metadatas[start:end]),
            )
        logger.info("Upserted %d vectors into collection %r", len(ids), self.collection_name)

    async def similarity_search(
        self,
        query_embedding: Sequence[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        where = _build_chroma_where(filters) if filters else None

        results = await asyncio.to_thread(
            self._collection.query,
            query_embeddings=[list(query_embedding)],
            n_results=k,
            where=where,
            include=["documents", "metadatas", "distances"],
        )

        hits: list[dict[str, Any]] = []
        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        for doc_id, content, meta, dist in zip(ids, docs, metas, distances):
            hits.append(
                {
                    "id": doc_id,
                    "content": content or "",
                    # Distance → 0-1 similarity; order is Chroma's.
                    "score": 1.0 / (1.0 + dist) if dist is not None else None,
                    "metadata": meta or {},
                }
            )
        return hits

    def health_check(self) -> bool:
        try:
            self._client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
