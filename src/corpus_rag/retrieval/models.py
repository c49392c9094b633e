"""Domain models for retrieval results and provenance."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class MetadataFilter(BaseModel):
    """Exact-match metadata filter for vector-store queries.

    Attributes
    ----------
    field:
        The metadata key to match (e.g. ``"category"``).
    operator:
        Only ``eq`` is understood by the stores.
    value:
        The value the metadata must equal.
    """

    field: str
    operator: str = "eq"
    value: Any = None

    @classmethod
    def equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="eq", value=value)


class RetrievedChunk(BaseModel):
    """One stored chunk returned by a similarity query, with its provenance."""

    id: str | None = None
    content: str = ""
    filename: str | None = None
    category: str | None = None
    chunk_index: int | None = None
    score: float | None = None

    @classmethod
    def from_hit(cls, hit: dict[str, Any]) -> RetrievedChunk:
        """Build from a :meth:`VectorStoreBase.similarity_search` result dict."""
        meta = hit.get("metadata") or {}
        return cls(
            id=hit.get("id"),
            content=hit.get("content") or "",
            filename=meta.get("filename"),
            category=meta.get("category"),
            chunk_index=meta.get("chunk_index"),
            score=hit.get("score"),
        )

    def context_block(self) -> str:
        """Render this chunk as a labelled block for the generation prompt."""
        chunk = self.chunk_index if self.chunk_index is not None else "?"
        return (
            f"Source: {self.filename or 'unknown'}\n"
            f"Category: {self.category or 'unknown'}\n"
            f"Chunk: {chunk}\n"
            "\n"
            f"{self.content}\n"
            "------------------------------------------------\n"
        )


class RetrievalContext(BaseModel):
    """Retrieved chunks (nearest first) and the context text built from them."""

    chunks: list[RetrievedChunk] = Field(default_factory=list)
    text: str
