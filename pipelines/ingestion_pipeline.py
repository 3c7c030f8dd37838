"""KFP v2 pipeline — Scheduled knowledge-base refresh.

    acquire + chunk + embed + upsert  →  (optional) evaluate

Acquisition and ingestion run in one component because the stages share
gateway handles and a cancellation hook; evaluation is a separate step
so it can be toggled per run.

Compile
-------
    python -m pipelines.ingestion_pipeline --compile
"""

from kfp import compiler, dsl

from pipelines.components.evaluate import evaluate_retrieval
from pipelines.components.ingest import ingest_knowledge


# ──────────────────────────────────────────────────────────────────────
# Pipeline definition
# ──────────────────────────────────────────────────────────────────────


@dsl.pipeline(
    name="knowledge-ingestion-pipeline",
    description=(
        "Acquire web knowledge → chunk → embed → upsert into the vector "
        "index.  Optionally evaluates retrieval quality afterwards."
    ),
)
def ingestion_pipeline(
    # ── Acquisition ────────────────────────────────────────────────
    limit: int = 15,
    # ── Chunking / embedding ───────────────────────────────────────
    chunk_max_length: int = 900,
    batch_size: int = 100,
    max_concurrency: int = 1,
    embedding_provider: str = "openai",
    embedding_model: str = "text-embedding-3-small",
    embedding_dimension: int = 1536,
    # ── Vector DB ──────────────────────────────────────────────────
    chroma_host: str = "chroma.kubeflow.svc.cluster.local",
    chroma_port: int = 8000,
    collection_name: str = "knowledge-base",
    distance_metric: str = "cosine",
    clear_old: bool = False,
    # ── Evaluation (optional) ──────────────────────────────────────
    run_evaluation: bool = False,
    eval_queries_path: str = "/data/eval_queries.json",
    retrieval_k: int = 5,
) -> None:
    """Refresh the knowledge index, then optionally evaluate retrieval.

    Parameters
    ----------
    limit:
        Maximum number of documents to acquire.
    chunk_max_length:
        Character budget per chunk.
    batch_size:
        Chunks embedded per provider call.
    max_concurrency:
        Batches processed at once.
    embedding_provider / embedding_model / embedding_dimension:
        Embedding configuration.
    chroma_host / chroma_port / collection_name:
        Chroma connection details.
    distance_metric:
        ``"cosine"`` | ``"l2"`` | ``"ip"``
    clear_old:
        Empty the index before ingesting.
    run_evaluation:
        Whether to run retrieval evaluation after ingestion.
    eval_queries_path:
        Path to the evaluation query set (JSON).
    retrieval_k:
        Passages retrieved per eval query.
    """
    ingest_task = ingest_knowledge(
        chroma_host=chroma_host,
        chroma_port=chroma_port,
        collection_name=collection_name,
        limit=limit,
        clear_old=clear_old,
        chunk_max_length=chunk_max_length,
        batch_size=batch_size,
        max_concurrency=max_concurrency,
        embedding_provider=embedding_provider,
        embedding_model=embedding_model,
        embedding_dimension=embedding_dimension,
        distance_metric=distance_metric,
    )

    with dsl.If(run_evaluation == True):  # noqa: E712
        evaluate_retrieval(
            eval_queries_path=eval_queries_path,
            chroma_host=chroma_host,
            chroma_port=chroma_port,
            collection_name=collection_name,
            embedding_provider=embedding_provider,
            embedding_model=embedding_model,
            k=retrieval_k,
        ).after(ingest_task)


# ──────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Knowledge ingestion pipeline")
    parser.add_argument(
        "--compile",
        action="store_true",
        help="Compile pipeline to YAML",
    )
    parser.add_argument(
        "--output",
        default="pipelines/compiled/ingestion_pipeline.yaml",
        help="Output path for compiled YAML",
    )
    args = parser.parse_args()

    if args.compile:
        compiler.Compiler().compile(ingestion_pipeline, args.output)
        print(f"Pipeline compiled → {args.output}")
