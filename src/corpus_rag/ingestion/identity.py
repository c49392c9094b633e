"""Deterministic chunk identifiers.

A chunk's ID depends only on where it sits (file, category, position),
never on its text or on when it was ingested, so re-ingesting a document
with the same chunk boundaries overwrites its previous records instead
of duplicating them.
"""

from __future__ import annotations

import hashlib

from corpus_rag.ingestion.models import Chunk


def make_chunk_id(filename: str, category: str, chunk_index: int) -> str:
    """Return the 40-char SHA-1 hex digest of ``filename|category|chunk_index``."""
    raw = f"{filename}|{category}|{chunk_index}"
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def chunk_id(chunk: Chunk) -> str:
    """Identity of *chunk* in the vector index."""
    return make_chunk_id(chunk.filename, chunk.category, chunk.chunk_index)
