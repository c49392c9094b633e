"""Shared pytest configuration, fakes and fixtures.

Nothing here touches the network: the vector index is an in-memory
dict, embeddings are keyword counts, and the chat model is a mock.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from langchain_core.embeddings import Embeddings
from langchain_core.messages import AIMessage

from corpus_rag.config import Settings
from corpus_rag.context import AppContext
from corpus_rag.retrieval.base import VectorStoreBase
from corpus_rag.retrieval.models import MetadataFilter
from corpus_rag.serving.app import create_app


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes ──────────────────────────────────────────────────────────────

VOCABULARY = ["rates", "rose", "fees", "dropped", "staff", "left", "revenue", "python"]


class KeywordEmbeddings(Embeddings):
    """Deterministic embeddings: one dimension per vocabulary word, plus a bias.

    Any text containing a marker in :attr:`fail_on` raises, and any text
    containing a marker in :attr:`empty_on` embeds to ``[]``.
    """

    def __init__(self) -> None:
        self.fail_on: set[str] = set()
        self.empty_on: set[str] = set()
        self.calls: list[str] = []

    def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise RuntimeError(f"provider error for {text!r}")
        if any(marker in text for marker in self.empty_on):
            return []
        lowered = text.lower()
        return [float(lowered.count(word)) for word in VOCABULARY] + [1.0]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_query(t) for t in texts]


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store with upsert-by-id and dot-product ranking."""

    def __init__(self) -> None:
        super().__init__("test-collection")
        self.records: dict[str, dict[str, Any]] = {}
        self.upsert_calls = 0
        self.last_filters: list[MetadataFilter] | None = None

    async def upsert(
        self,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[dict[str, Any]],
    ) -> None:
        self.upsert_calls += 1
        for record_id, embedding, document, metadata in zip(ids, embeddings, documents, metadatas):
            self.records[record_id] = {
                "embedding": list(embedding),
                "content": document,
                "metadata": dict(metadata),
            }

    async def similarity_search(
        self,
        query_embedding: Sequence[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        self.last_filters = filters
        hits = []
        for record_id, record in self.records.items():
            if any(record["metadata"].get(f.field) != f.value for f in filters or []):
                continue
            score = sum(a * b for a, b in zip(query_embedding, record["embedding"]))
            hits.append(
                {
                    "id": record_id,
                    "content": record["content"],
                    "score": score,
                    "metadata": record["metadata"],
                }
            )
        hits.sort(key=lambda h: h["score"], reverse=True)
        return hits[:k]

    def count(self, **where: Any) -> int:
        return sum(
            1
            for record in self.records.values()
            if all(record["metadata"].get(key) == value for key, value in where.items())
        )


def make_chat_model(reply: str = "Fees dropped.") -> MagicMock:
    """A chat-model stand-in whose ``ainvoke`` returns *reply*."""
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=AIMessage(content=reply))
    return llm


# ── Fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def corpus_dir(tmp_path: Path) -> Path:
    root = tmp_path / "corpus"
    root.mkdir()
    return root


@pytest.fixture()
def test_settings(corpus_dir: Path) -> Settings:
    return Settings(
        _env_file=None,
        rag_data_dir=str(corpus_dir),
        chunk_length=20,
        chunk_overlap=0,
        embed_batch_size=4,
        retrieval_k=5,
    )


@pytest.fixture()
def embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def llm() -> MagicMock:
    return make_chat_model()


@pytest.fixture()
def app_context(
    test_settings: Settings,
    store: InMemoryVectorStore,
    embeddings: KeywordEmbeddings,
    llm: MagicMock,
) -> AppContext:
    return AppContext.create(test_settings, store=store, embeddings=embeddings, llm=llm)


@pytest.fixture()
def client(app_context: AppContext) -> TestClient:
    return TestClient(create_app(app_context))
