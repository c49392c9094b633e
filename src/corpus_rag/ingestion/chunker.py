"""Sentence-aligned text chunking with character overlap."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from corpus_rag.ingestion.models import Chunk

if TYPE_CHECKING:
    from collections.abc import Iterable

    from corpus_rag.ingestion.models import Document

_WHITESPACE = re.compile(r"\s+")
_SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[str]:
    """Collapse whitespace and split *text* after ``.``, ``!`` and ``?``.

    The terminating punctuation stays attached to its sentence.
    """
    normalised = _WHITESPACE.sub(" ", text).strip()
    if not normalised:
        return []
    return [s for s in _SENTENCE_BOUNDARY.split(normalised) if s]


def chunk_text(text: str, max_size: int, overlap: int = 0) -> list[str]:
    """Pack whole sentences into chunks of at most *max_size* characters.

    Parameters
    ----------
    text:
        Raw extracted text.
    max_size:
        Soft upper bound on chunk length.  A single sentence longer than
        this is emitted on its own, unsplit.
    overlap:
        Number of trailing characters of each flushed chunk that seed the
        next one.  Counted in raw characters, so the seed may start
        mid-word.

    Returns
    -------
    list[str]
        Trimmed chunks in document order; empty for blank input.
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if not 0 <= overlap < max_size:
        raise ValueError(f"overlap ({overlap}) must be >= 0 and < max_size ({max_size})")

    chunks: list[str] = []
    buffer = ""
    for sentence in split_sentences(text):
        candidate = f"{buffer} {sentence}" if buffer else sentence
        if len(candidate) > max_size and buffer:
            flushed = buffer.strip()
            chunks.append(flushed)
            buffer = _overlap_seed(flushed, overlap, room=max_size - len(sentence) - 1)
            candidate = f"{buffer} {sentence}" if buffer else sentence
        buffer = candidate

    if buffer.strip():
        chunks.append(buffer.strip())
    return chunks


def _overlap_seed(flushed: str, overlap: int, *, room: int) -> str:
    """Tail of *flushed* carried into the next chunk, capped by *room*."""
    size = min(overlap, room)
    if size <= 0:
        return ""
    return flushed[-size:].strip()


def chunk_documents(
    documents: Iterable[Document],
    max_size: int,
    overlap: int = 0,
) -> list[Chunk]:
    """Chunk every document, numbering chunks from 0 within each document.

    Document order is preserved, so all chunks of the first document
    precede those of the second, and so on.
    """
    chunks: list[Chunk] = []
    for doc in documents:
        for index, content in enumerate(chunk_text(doc.content, max_size, overlap)):
            chunks.append(
                Chunk(
                    filename=doc.filename,
                    category=doc.category,
                    chunk_index=index,
                    content=content,
                )
            )
    return chunks
