"""Abstract base class for vector-store backends.

The pipelines only ever talk to a :class:`VectorStoreBase`; nothing else
in the package knows which database is behind it.  Adding a backend
means subclassing and implementing the two abstract coroutines.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from corpus_rag.retrieval.models import MetadataFilter


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    @abstractmethod
    async def upsert(
        self,
        ids: Sequence[str],
        embeddings: Sequence[Sequence[float]],
        documents: Sequence[str],
        metadatas: Sequence[dict[str, Any]],
    ) -> None:
        """Insert or overwrite records by ID.

        All four sequences are parallel and of equal length.  Writing an
        ID that already exists replaces that record.
        """
        ...

    @abstractmethod
    async def similarity_search(
        self,
        query_embedding: Sequence[float],
        *,
        k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[dict[str, Any]]:
        """Return up to *k* records nearest to *query_embedding*, nearest first.

        Each result dict **must** contain:

        * ``"id"`` – record identifier
        * ``"content"`` – the stored text
        * ``"score"`` – similarity score (higher = more similar), or ``None``
        * ``"metadata"`` – the stored metadata dict

        Parameters
        ----------
        query_embedding:
            Dense vector for the query.
        k:
            Maximum number of results.
        filters:
            Optional metadata filters applied by the backend.
        """
        ...

    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable.  Optional."""
        return True
