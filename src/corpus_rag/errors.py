"""Exception types raised by the ingestion and retrieval pipelines.

Text extraction and answer generation never raise: they degrade to an
empty string and to the "not available" sentinel respectively.
"""

from __future__ import annotations


class CorpusRagError(Exception):
    """Base class for all errors raised by :mod:`corpus_rag`."""


class EmbeddingFailure(CorpusRagError):
    """No usable vector could be produced.

    Raised for the query path, and for an ingestion call in which every
    chunk failed to embed.
    """


class IndexWriteInvariantViolation(CorpusRagError):
    """The parallel arrays handed to the vector index are empty or misaligned."""


class NoChunksCreated(CorpusRagError):
    """Chunking produced nothing to embed."""


class NoMatchingDocuments(CorpusRagError):
    """A corpus traversal (optionally filtered) yielded no documents."""
