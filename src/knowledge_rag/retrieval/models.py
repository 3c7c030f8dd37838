"""Domain models for vector records, similarity matches, and query filters."""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

# Vector-store metadata must be flat scalars.
MetadataValue = Union[str, int, float, bool]


class MetadataFilter(BaseModel):
    """Declarative metadata filter for vector-store queries.

    Attributes
    ----------
    field:
        The metadata key to filter on (e.g. ``"url"``, ``"category"``).
    operator:
        Comparison operator — one of ``eq``, ``ne``, ``gt``, ``gte``,
        ``lt``, ``lte``, ``in``, ``nin``.
    value:
        The value (or list of values for ``in`` / ``nin``) to compare against.
    """

    field: str
    operator: str = "eq"
    value: Any = None

    # -- helpers for common filters ------------------------------------------

    @classmethod
    def equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="eq", value=value)

    @classmethod
    def not_equals(cls, field: str, value: Any) -> MetadataFilter:
        return cls(field=field, operator="ne", value=value)

    @classmethod
    def one_of(cls, field: str, values: list[Any]) -> MetadataFilter:
        return cls(field=field, operator="in", value=values)


class VectorRecord(BaseModel):
    """One row of the vector index: id, embedding, and flat metadata.

    The id is deterministic (see :func:`~knowledge_rag.ingestion.chunker.chunk_id`),
    so writing the same record twice overwrites it.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    embedding: list[float]
    metadata: dict[str, MetadataValue] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        return str(self.metadata.get("text", ""))


class VectorMatch(BaseModel):
    """A single similarity-query hit.  Higher ``score`` means more similar."""

    id: str
    score: float
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def text(self) -> str:
        return str(self.metadata.get("text", ""))
