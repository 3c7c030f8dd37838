"""Ingestion pipeline — chunk, embed and upsert documents into the vector index.

Usage::

    from knowledge_rag.ingestion.pipeline import IngestionPipeline

    pipeline = IngestionPipeline(embedder, store, index_name="knowledge-base", dimension=1536)
    stats = pipeline.ingest(docs, IngestOptions(batch_size=50, clear_old=True))

Failure policy
--------------
* An embedding batch that comes back unavailable or misaligned is logged
  and skipped.  The run continues with the next batch.
* A store write failure aborts the run (:class:`StoreWriteError`).
* A set ``cancel_event`` stops the run before the next batch starts
  (:class:`IngestionCancelled`, carrying the partial stats).
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING

from knowledge_rag.errors import BatchAlignmentError, IngestionCancelled
from knowledge_rag.ingestion.acquirer import dedupe_by_url
from knowledge_rag.ingestion.chunker import build_chunks
from knowledge_rag.ingestion.embedder import EmbeddingGateway
from knowledge_rag.ingestion.models import (
    MIN_CONTENT_LENGTH,
    Chunk,
    IngestOptions,
    IngestStats,
    SourceDocument,
)
from knowledge_rag.outcomes import Unavailable
from knowledge_rag.retrieval.base import VectorStoreBase
from knowledge_rag.retrieval.models import VectorRecord

if TYPE_CHECKING:
    from knowledge_rag.ingestion.acquirer import ContentAcquirer
    from knowledge_rag.retrieval.seed import SeedEntry

logger = logging.getLogger(__name__)

# Sentinel returned by a worker that saw the cancel event.
_CANCELLED = -1


class IngestionPipeline:
    """Turn cleaned documents into vectors in one named index.

    Parameters
    ----------
    embedder:
        Embedding gateway; called once per batch.
    store:
        Vector-store backend.
    index_name:
        Target index / collection.
    dimension:
        Embedding dimension the index is created with.
    metric:
        Distance metric (``cosine`` | ``l2`` | ``ip``).
    namespace:
        Prefix of every chunk id.
    topic:
        Value of the ``topic`` metadata field on every record.
    """

    def __init__(
        self,
        embedder: EmbeddingGateway,
        store: VectorStoreBase,
        *,
        index_name: str,
        dimension: int,
        metric: str = "cosine",
        namespace: str = "kb",
        topic: str = "knowledge",
    ) -> None:
        self.embedder = embedder
        self.store = store
        self.index_name = index_name
        self.dimension = dimension
        self.metric = metric
        self.namespace = namespace
        self.topic = topic

    # -- public API -----------------------------------------------------------

    def ingest(
        self,
        documents: list[SourceDocument],
        options: IngestOptions | None = None,
        cancel_event: threading.Event | None = None,
    ) -> IngestStats:
        """Ingest *documents* and return counts.

        Re-running with the same documents produces the same chunk ids,
        so the index ends up with the same vector set.  Documents whose
        URLs differ only in query string or fragment share those ids, so
        only the first of them is chunked.
        """
        options = options or IngestOptions()
        t0 = time.monotonic()

        self.store.ensure_index(self.index_name, self.dimension, self.metric)
        if options.clear_old:
            logger.info("Clearing index %r before ingestion", self.index_name)
            self.store.delete_all(self.index_name)

        unique = dedupe_by_url(documents)
        if len(unique) < len(documents):
            logger.info("Dropped %d documents with duplicate URLs", len(documents) - len(unique))

        chunks: list[Chunk] = []
        for doc in unique:
            if len(doc.text.strip()) < MIN_CONTENT_LENGTH:
                logger.debug("Skipping %s (content too short)", doc.url)
                continue
            chunks.extend(build_chunks(doc, options.chunk_max_length, self.namespace))

        if not chunks:
            logger.info("No chunks produced from %d documents", len(documents))
            return IngestStats(docs=len(documents))

        batches = [
            chunks[start : start + options.batch_size]
            for start in range(0, len(chunks), options.batch_size)
        ]
        logger.info("Ingesting %d chunks from %d documents in %d batches", len(chunks), len(documents), len(batches))

        if options.max_concurrency > 1 and len(batches) > 1:
            upserted, skipped, cancelled = self._run_concurrent(batches, options.max_concurrency, cancel_event)
        else:
            upserted, skipped, cancelled = self._run_sequential(batches, cancel_event)

        stats = IngestStats(docs=len(documents), chunks=len(chunks), upserted=upserted, skipped_batches=skipped)
        if cancelled:
            logger.warning("Ingestion cancelled: %d/%d chunks upserted", upserted, len(chunks))
            raise IngestionCancelled(stats)

        logger.info(
            "Ingestion complete: %d docs, %d chunks, %d upserted, %d batches skipped (%.1fs)",
            stats.docs, stats.chunks, stats.upserted, stats.skipped_batches, time.monotonic() - t0,
        )
        return stats

    def ingest_sources(
        self,
        acquirer: ContentAcquirer,
        limit: int = 15,
        options: IngestOptions | None = None,
        cancel_event: threading.Event | None = None,
    ) -> IngestStats:
        """Acquire up to *limit* documents and ingest them in one go."""
        documents = acquirer.acquire(limit)
        return self.ingest(documents, options, cancel_event)

    # -- batch execution ------------------------------------------------------

    def _run_sequential(
        self,
        batches: list[list[Chunk]],
        cancel_event: threading.Event | None,
    ) -> tuple[int, int, bool]:
        upserted = skipped = 0
        for number, batch in enumerate(batches, 1):
            if cancel_event is not None and cancel_event.is_set():
                return upserted, skipped, True
            written = self._process_batch(number, batch)
            if written:
                upserted += written
            else:
                skipped += 1
        return upserted, skipped, False

    def _run_concurrent(
        self,
        batches: list[list[Chunk]],
        max_workers: int,
        cancel_event: threading.Event | None,
    ) -> tuple[int, int, bool]:
        def worker(number: int, batch: list[Chunk]) -> int:
            if cancel_event is not None and cancel_event.is_set():
                return _CANCELLED
            return self._process_batch(number, batch)

        upserted = skipped = 0
        cancelled = False
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ingest") as pool:
            futures: list[Future[int]] = [
                pool.submit(worker, number, batch) for number, batch in enumerate(batches, 1)
            ]
            try:
                for future in futures:
                    written = future.result()
                    if written == _CANCELLED:
                        cancelled = True
                    elif written:
                        upserted += written
                    else:
                        skipped += 1
            except BaseException:
                for future in futures:
                    future.cancel()
                raise
        return upserted, skipped, cancelled

    def _process_batch(self, number: int, batch: list[Chunk]) -> int:
        """Embed and upsert one batch.  Returns the number of records written (0 = skipped)."""
        texts = [chunk.text for chunk in batch]
        try:
            outcome = self.embedder.embed_batch(texts)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Batch %d: embedding raised, skipping %d chunks: %s", number, len(batch), exc)
            return 0
        if isinstance(outcome, Unavailable):
            logger.warning("Batch %d: embeddings unavailable (%s), skipping %d chunks", number, outcome.reason, len(batch))
            return 0

        vectors = outcome.value
        if len(vectors) != len(batch):
            err = BatchAlignmentError(len(batch), len(vectors), self.embedder.provider_name)
            logger.warning("Batch %d: %s; skipping", number, err)
            return 0

        records = [self._to_record(chunk, vector) for chunk, vector in zip(batch, vectors)]
        self.store.upsert(self.index_name, records)
        logger.info("Batch %d: upserted %d vectors", number, len(records))
        return len(records)

    def _to_record(self, chunk: Chunk, embedding: list[float]) -> VectorRecord:
        return VectorRecord(
            id=chunk.id,
            embedding=embedding,
            metadata={
                "text": chunk.text,
                "category": "web",
                "topic": self.topic,
                "url": chunk.source_url,
                "title": chunk.title,
                "source": chunk.provider,
                "chunkIndex": chunk.index,
                "chunkCount": chunk.total,
            },
        )


def seed_index(
    embedder: EmbeddingGateway,
    store: VectorStoreBase,
    corpus: list[SeedEntry],
    *,
    index_name: str,
    dimension: int,
    metric: str = "cosine",
    batch_size: int = 100,
) -> int:
    """Write the curated seed corpus into *index_name*.

    Each entry keeps its own id as vector id, so re-seeding overwrites.
    Entries whose embedding is unavailable are skipped.

    Returns
    -------
    int
        Number of vectors written.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    store.ensure_index(index_name, dimension, metric)

    records: list[VectorRecord] = []
    for entry in corpus:
        outcome = embedder.embed(entry.content)
        if isinstance(outcome, Unavailable):
            logger.warning("Skipping seed entry %s: %s", entry.id, outcome.reason)
            continue
        records.append(
            VectorRecord(
                id=entry.id,
                embedding=outcome.value,
                metadata={"text": entry.content, "category": entry.category, "topic": entry.topic},
            )
        )

    for start in range(0, len(records), batch_size):
        store.upsert(index_name, records[start : start + batch_size])

    logger.info("Seeded %d/%d entries into %r", len(records), len(corpus), index_name)
    return len(records)
