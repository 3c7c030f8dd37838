"""Domain models flowing through acquisition and ingestion."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

# Cleaned text shorter than this is noise, not content.
MIN_CONTENT_LENGTH = 200


class SourceDocument(BaseModel):
    """A cleaned document produced by the content acquirer.

    Attributes
    ----------
    url:
        Where the document came from.  Identity is the URL with its query
        string stripped (see :func:`~knowledge_rag.ingestion.normalizer.normalize_url`).
    title:
        Page title, or the URL when none was available.
    text:
        Normalised plain text.
    provider:
        Which provider produced the document (``"exa"``, ``"direct"``, …).
    """

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    text: str
    provider: str = "direct"


class Chunk(BaseModel):
    """A bounded span of a source document — the unit of embedding and storage."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    source_url: str
    index: int
    total: int
    title: str = ""
    provider: str = "direct"


class IngestOptions(BaseModel):
    """Knobs for a single :meth:`IngestionPipeline.ingest` run.

    Attributes
    ----------
    chunk_max_length:
        Maximum characters per chunk (single oversized sentences excepted).
    batch_size:
        Number of chunks embedded per provider call.
    clear_old:
        Delete every vector in the index before ingesting.
    max_concurrency:
        Upper bound on batches embedded/upserted at once.  ``1`` keeps
        the run strictly sequential.
    """

    chunk_max_length: int = Field(default=900, ge=1)
    batch_size: int = Field(default=100, ge=1)
    clear_old: bool = False
    max_concurrency: int = Field(default=1, ge=1)


class IngestStats(BaseModel):
    """Read-only summary of one ingestion run.  ``upserted <= chunks``."""

    model_config = ConfigDict(frozen=True)

    docs: int = 0
    chunks: int = 0
    upserted: int = 0
    skipped_batches: int = 0
