"""Exception hierarchy for the ingestion and retrieval pipeline.

    KnowledgeBaseError
    +-- ProviderUnavailableError   credential missing or provider down
    +-- StoreWriteError            create-index / delete-all / upsert failed
    +-- StoreReadError             similarity query failed
    +-- BatchAlignmentError        embedding batch came back with the wrong length
    +-- IngestionCancelled         cancellation hook fired between batches

Only :class:`StoreWriteError` is allowed to abort an ingestion run.  The
others are absorbed where they originate and turned into a fallback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from knowledge_rag.ingestion.models import IngestStats


class KnowledgeBaseError(Exception):
    """Base class; ``provider_name`` identifies the external service involved."""

    def __init__(self, message: str = "Knowledge base error", provider_name: str | None = None) -> None:
        self.message = message
        self.provider_name = provider_name
        super().__init__(message)

    def __str__(self) -> str:
        if self.provider_name:
            return f"[{self.provider_name}] {self.message}"
        return self.message


class ProviderUnavailableError(KnowledgeBaseError):
    """Raised when a provider has no credential configured or cannot be reached."""


class StoreWriteError(KnowledgeBaseError):
    """Raised when the vector store rejects a write.  Fatal to an ingestion run."""


class StoreReadError(KnowledgeBaseError):
    """Raised when a similarity query fails."""


class BatchAlignmentError(KnowledgeBaseError):
    """Raised when an embedding batch does not map one-to-one onto its inputs."""

    def __init__(self, expected: int, received: int, provider_name: str | None = None) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Embedding batch returned {received} vectors for {expected} inputs",
            provider_name=provider_name,
        )


class IngestionCancelled(KnowledgeBaseError):
    """Raised when an ingestion run is cancelled before starting a new batch."""

    def __init__(self, stats: IngestStats) -> None:
        self.stats = stats
        super().__init__(
            f"Ingestion cancelled after {stats.upserted}/{stats.chunks} chunks upserted"
        )
