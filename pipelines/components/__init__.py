"""KFP v2 components — each file exports one @dsl.component."""

from pipelines.components.evaluate import evaluate_retrieval
from pipelines.components.ingest import ingest_knowledge

__all__ = [
    "evaluate_retrieval",
    "ingest_knowledge",
]
