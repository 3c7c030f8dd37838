"""KFP v2 component — Acquire web knowledge and ingest it into the vector store.

Wraps :meth:`knowledge_rag.ingestion.pipeline.IngestionPipeline.ingest_sources`
so a scheduled pipeline run refreshes the index the same way
``POST /knowledge/ingest`` does.  Credentials (``OPENAI_API_KEY``,
``EXA_API_KEY``) come from the container environment.

Local testing
-------------
    from pipelines.components.ingest import ingest_knowledge
    ingest_knowledge.python_func(
        chroma_host="localhost",
        chroma_port=8000,
        collection_name="knowledge-base",
        metrics=_FakeArtifact("/tmp/metrics"),
    )
"""

from kfp import dsl


@dsl.component(
    base_image="python:3.11-slim",
    packages_to_install=["knowledge-rag"],
)
def ingest_knowledge(
    chroma_host: str,
    chroma_port: int,
    collection_name: str,
    metrics: dsl.Output[dsl.Metrics],
    limit: int = 15,
    clear_old: bool = False,
    chunk_max_length: int = 900,
    batch_size: int = 100,
    max_concurrency: int = 1,
    embedding_provider: str = "openai",
    embedding_model: str = "text-embedding-3-small",
    embedding_dimension: int = 1536,
    distance_metric: str = "cosine",
) -> str:
    """Acquire up to *limit* documents, chunk, embed and upsert them.

    Parameters
    ----------
    chroma_host / chroma_port / collection_name:
        Vector-store connection details and target index.
    metrics:
        Output Metrics artifact with ingestion statistics.
    limit:
        Maximum number of documents to acquire.
    clear_old:
        Delete every vector in the index first.
    chunk_max_length:
        Character budget per chunk.
    batch_size:
        Chunks embedded per provider call.
    max_concurrency:
        Batches embedded / upserted at once.
    embedding_provider / embedding_model / embedding_dimension:
        Embedding configuration; must match the index.
    distance_metric:
        ``cosine`` | ``l2`` | ``ip``

    Returns
    -------
    str
        Summary, e.g. ``"Ingested 12 docs → 87/87 chunks upserted into 'knowledge-base'"``.
    """
    import logging
    import time

    from knowledge_rag.config import Settings
    from knowledge_rag.ingestion.models import IngestOptions
    from knowledge_rag.services import build_services

    logging.basicConfig(level=logging.INFO)
    log = logging.getLogger("ingest_knowledge")

    config = Settings(
        chroma_host=chroma_host,
        chroma_port=chroma_port,
        chroma_collection=collection_name,
        embedding_provider=embedding_provider,
        embedding_model=embedding_model,
        embedding_dimension=embedding_dimension,
        distance_metric=distance_metric,
    )
    services = build_services(config)
    options = IngestOptions(
        chunk_max_length=chunk_max_length,
        batch_size=batch_size,
        clear_old=clear_old,
        max_concurrency=max_concurrency,
    )

    t0 = time.monotonic()
    stats = services.pipeline.ingest_sources(services.acquirer, limit, options)
    elapsed = time.monotonic() - t0

    # KFP Metrics
    metrics.log_metric("documents_acquired", stats.docs)
    metrics.log_metric("chunks_produced", stats.chunks)
    metrics.log_metric("vectors_upserted", stats.upserted)
    metrics.log_metric("batches_skipped", stats.skipped_batches)
    metrics.log_metric("ingest_elapsed_seconds", round(elapsed, 2))

    msg = (f"Ingested {stats.docs} docs → {stats.upserted}/{stats.chunks} chunks "
           f"upserted into '{collection_name}'")
    log.info(msg)
    return msg
