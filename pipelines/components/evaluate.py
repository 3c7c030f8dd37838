"""KFP v2 component — Evaluate retrieval quality against a labelled query set."""

from kfp import dsl


@dsl.component(
    base_image="python:3.11-slim",
    packages_to_install=["knowledge-rag"],
)
def evaluate_retrieval(
    eval_queries_path: str,
    chroma_host: str,
    chroma_port: int,
    collection_name: str,
    metrics: dsl.Output[dsl.Metrics],
    embedding_provider: str = "openai",
    embedding_model: str = "text-embedding-3-small",
    k: int = 5,
) -> float:
    """Run a hit-rate evaluation through the retrieval service.

    Parameters
    ----------
    eval_queries_path:
        Path to a JSON file with ``[{"query": "...", "expected_text": "..."}]``.
        A query is a hit when any returned passage contains ``expected_text``
        (case-insensitive).
    chroma_host / chroma_port / collection_name:
        Chroma connection parameters.
    metrics:
        Output Metrics artifact.
    embedding_provider / embedding_model:
        Must match the model the index was built with.
    k:
        Number of passages to retrieve per query.

    Returns
    -------
    float
        Hit rate ∈ [0, 1].
    """
    import json
    import logging

    from knowledge_rag.config import Settings
    from knowledge_rag.services import build_services

    logging.basicConfig(level=logging.INFO)
    log = logging.getLogger("evaluate_retrieval")

    with open(eval_queries_path) as f:
        eval_set = json.load(f)

    config = Settings(
        chroma_host=chroma_host,
        chroma_port=chroma_port,
        chroma_collection=collection_name,
        embedding_provider=embedding_provider,
        embedding_model=embedding_model,
    )
    retrieval = build_services(config).retrieval

    hits = 0
    fallbacks = 0
    for item in eval_set:
        outcome = retrieval.search_with_outcome(item["query"], k)
        if outcome.strategy != "vector":
            fallbacks += 1
        expected = item["expected_text"].lower()
        if any(expected in passage.lower() for passage in outcome.passages):
            hits += 1

    hit_rate = hits / len(eval_set) if eval_set else 0.0
    metrics.log_metric("hit_rate", round(hit_rate, 4))
    metrics.log_metric("queries", len(eval_set))
    metrics.log_metric("fallback_queries", fallbacks)
    log.info("Hit rate: %.2f%% (%d/%d), %d answered by fallback", hit_rate * 100, hits, len(eval_set), fallbacks)
    return hit_rate
