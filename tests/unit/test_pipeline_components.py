"""Unit tests for the KFP components.

Each test exercises the *Python function* behind the ``@dsl.component``
decorator (``component.python_func``), so no Kubeflow cluster is needed.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

from knowledge_rag.ingestion.models import IngestStats
from knowledge_rag.retrieval import SearchOutcome


class _FakeArtifact:
    """Minimal stand-in for ``dsl.Metrics``."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.metadata: dict = {}
        self._metrics: dict = {}

    def log_metric(self, name: str, value) -> None:  # noqa: ANN001
        self._metrics[name] = value


class TestIngestKnowledge:
    @patch("knowledge_rag.services.build_services")
    def test_runs_pipeline_and_logs_metrics(self, mock_build: MagicMock, tmp_path: Path) -> None:
        services = mock_build.return_value
        services.pipeline.ingest_sources.return_value = IngestStats(docs=4, chunks=10, upserted=8, skipped_batches=1)
        metrics = _FakeArtifact(str(tmp_path / "metrics"))

        from pipelines.components.ingest import ingest_knowledge

        result = ingest_knowledge.python_func(
            chroma_host="chroma.test",
            chroma_port=8000,
            collection_name="kb",
            metrics=metrics,
            limit=4,
            clear_old=True,
            chunk_max_length=500,
            batch_size=5,
        )

        config = mock_build.call_args.args[0]
        assert config.chroma_host == "chroma.test"
        assert config.chroma_collection == "kb"
        _, limit, options = services.pipeline.ingest_sources.call_args.args
        assert limit == 4
        assert options.clear_old is True
        assert options.chunk_max_length == 500
        assert options.batch_size == 5
        assert metrics._metrics["vectors_upserted"] == 8
        assert metrics._metrics["batches_skipped"] == 1
        assert "8/10 chunks" in result


class TestEvaluateRetrieval:
    @patch("knowledge_rag.services.build_services")
    def test_hit_rate(self, mock_build: MagicMock, tmp_path: Path) -> None:
        eval_path = tmp_path / "eval.json"
        eval_path.write_text(json.dumps([
            {"query": "fees", "expected_text": "annual fee"},
            {"query": "app", "expected_text": "ios"},
        ]))
        mock_build.return_value.retrieval.search_with_outcome.side_effect = [
            SearchOutcome(passages=["There is no Annual Fee."], strategy="vector"),
            SearchOutcome(passages=["Android only."], strategy="keyword"),
        ]
        metrics = _FakeArtifact(str(tmp_path / "metrics"))

        from pipelines.components.evaluate import evaluate_retrieval

        hit_rate = evaluate_retrieval.python_func(
            eval_queries_path=str(eval_path),
            chroma_host="chroma.test",
            chroma_port=8000,
            collection_name="kb",
            metrics=metrics,
        )

        assert hit_rate == 0.5
        assert metrics._metrics["fallback_queries"] == 1
