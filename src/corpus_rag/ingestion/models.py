"""Value objects flowing through the ingestion pipeline."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Document(BaseModel):
    """Extracted text of one source file.

    Attributes
    ----------
    filename:
        Base name of the source file, e.g. ``"report.pdf"``.
    category:
        Grouping label derived from the directory tree below the corpus
        root, with ``/`` between nested folders.  ``""`` for files placed
        directly under the root.
    content:
        Extracted plain text.
    """

    filename: str
    category: str = ""
    content: str


class Chunk(BaseModel):
    """A sentence-aligned slice of a :class:`Document`."""

    filename: str
    category: str = ""
    chunk_index: int = Field(ge=0)
    content: str


class EmbeddedChunk(Chunk):
    """A :class:`Chunk` together with its (non-empty) embedding vector."""

    embedding: list[float] = Field(min_length=1)
