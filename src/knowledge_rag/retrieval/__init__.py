"""
Retrieval — vector search, seed-corpus fallback, and the store abstraction.

This module wraps the vector store behind a clean interface so that the
ingestion and answer layers never need to know which DB backs retrieval.

Public surface
--------------
- :class:`RetrievalService` — main entry point; ordered strategy fallback.
- :class:`VectorSearchStrategy`, :class:`LocalKeywordStrategy` — the strategies.
- :class:`VectorStoreBase` — abstract backend (subclass for Pinecone, etc.).
- :class:`ChromaVectorStore` — default Chroma backend.
- :class:`VectorRecord`, :class:`VectorMatch`, :class:`MetadataFilter` — data models.
- :data:`SIMILARITY_THRESHOLD` — the fixed quality gate (0.7).
"""

from knowledge_rag.retrieval.base import VectorStoreBase
from knowledge_rag.retrieval.models import MetadataFilter, VectorMatch, VectorRecord
from knowledge_rag.retrieval.retriever import RetrievalService, SearchOutcome
from knowledge_rag.retrieval.seed import SeedEntry, keyword_search, load_seed_corpus
from knowledge_rag.retrieval.strategies import (
    SIMILARITY_THRESHOLD,
    LocalKeywordStrategy,
    SearchStrategy,
    VectorSearchStrategy,
)

__all__ = [
    "SIMILARITY_THRESHOLD",
    "ChromaVectorStore",
    "LocalKeywordStrategy",
    "MetadataFilter",
    "RetrievalService",
    "SearchOutcome",
    "SearchStrategy",
    "SeedEntry",
    "VectorMatch",
    "VectorRecord",
    "VectorSearchStrategy",
    "VectorStoreBase",
    "keyword_search",
    "load_seed_corpus",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from knowledge_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
