"""
Retrieval — vector search and context assembly.

This module wraps the vector store behind a small interface so that the
pipelines never need to know which database backs retrieval.

Public surface
--------------
- :class:`ContextRetriever` — question → nearest chunks → context text.
- :class:`VectorStoreBase` — abstract backend.
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`MetadataFilter`, :class:`RetrievedChunk`, :class:`RetrievalContext` — data models.
"""

from corpus_rag.retrieval.base import VectorStoreBase
from corpus_rag.retrieval.models import MetadataFilter, RetrievalContext, RetrievedChunk
from corpus_rag.retrieval.retriever import NO_CONTEXT, ContextRetriever, build_context

__all__ = [
    "NO_CONTEXT",
    "ChromaVectorStore",
    "ContextRetriever",
    "MetadataFilter",
    "RetrievalContext",
    "RetrievedChunk",
    "VectorStoreBase",
    "build_context",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from corpus_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
