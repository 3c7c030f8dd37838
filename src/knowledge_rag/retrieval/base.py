"""Abstract base class for vector-store backends.

Adding a new backend (Pinecone, Qdrant …) only requires subclassing
:class:`VectorStoreBase` and implementing the abstract methods.  The
ingestion pipeline and retrieval service are backend-agnostic.

Error contract
--------------
* Writes (``ensure_index``, ``delete_all``, ``upsert``) raise
  :class:`~knowledge_rag.errors.StoreWriteError`.
* Reads (``query``, ``count``) raise
  :class:`~knowledge_rag.errors.StoreReadError`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from knowledge_rag.retrieval.models import MetadataFilter, VectorMatch, VectorRecord


class VectorStoreBase(ABC):
    """Backend-agnostic vector-store interface."""

    provider_name: str = "vector_store"

    # -- required overrides ---------------------------------------------------

    @abstractmethod
    def ensure_index(self, name: str, dimension: int, metric: str = "cosine") -> None:
        """Create index *name* unless it exists; return once it is ready.

        Idempotent: calling it against an existing index is a no-op.
        """
        ...

    @abstractmethod
    def delete_all(self, name: str) -> None:
        """Remove every vector from index *name*, keeping the index."""
        ...

    @abstractmethod
    def upsert(self, name: str, records: list[VectorRecord]) -> None:
        """Insert or overwrite *records* by id."""
        ...

    @abstractmethod
    def query(
        self,
        name: str,
        embedding: list[float],
        *,
        top_k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[VectorMatch]:
        """Return up to *top_k* nearest neighbours, most similar first.

        Parameters
        ----------
        name:
            Index to search.
        embedding:
            Dense vector for the query.
        top_k:
            Number of results to return.
        filters:
            Optional metadata filters applied server-side.
        """
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...

    # -- optional overrides ---------------------------------------------------

    def count(self, name: str) -> int:
        """Number of vectors in index *name*.  Optional — raises by default."""
        raise NotImplementedError(f"{type(self).__name__} does not support count")
