"""Retrieval strategies — the degradation policy as an ordered list.

:class:`~knowledge_rag.retrieval.retriever.RetrievalService` walks its
strategies in order and returns the first :class:`Hit`.  A :class:`Miss`
means "could not run, try the next one"; an empty :class:`Hit` is a real
answer and stops the walk.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from knowledge_rag.errors import StoreReadError
from knowledge_rag.ingestion.embedder import EmbeddingGateway
from knowledge_rag.outcomes import Hit, Miss, StrategyOutcome, Unavailable
from knowledge_rag.retrieval.base import VectorStoreBase
from knowledge_rag.retrieval.seed import SeedEntry, keyword_search

logger = logging.getLogger(__name__)

# Fixed quality gate: only matches scoring strictly above this survive.
SIMILARITY_THRESHOLD = 0.7


class SearchStrategy(ABC):
    """One way of answering a query."""

    name: str = "strategy"

    @abstractmethod
    def search(self, query: str, top_k: int) -> StrategyOutcome:
        ...


class VectorSearchStrategy(SearchStrategy):
    """Embed the query, search the index, and keep matches above the threshold."""

    name = "vector"

    def __init__(self, embedder: EmbeddingGateway, store: VectorStoreBase, index_name: str) -> None:
        self._embedder = embedder
        self._store = store
        self._index_name = index_name

    def search(self, query: str, top_k: int) -> StrategyOutcome:
        embedded = self._embedder.embed(query)
        if isinstance(embedded, Unavailable):
            logger.warning("Could not create query embedding (%s)", embedded.reason)
            return Miss(f"embedding unavailable: {embedded.reason}")

        try:
            matches = self._store.query(self._index_name, embedded.value, top_k=top_k)
        except StoreReadError as exc:
            logger.error("Vector query failed: %s", exc)
            return Miss(f"vector store unavailable: {exc}")
        except Exception as exc:  # noqa: BLE001
            logger.exception("Vector query failed")
            return Miss(f"vector store error: {exc}")

        if not matches:
            logger.warning("No matches found in vector search")
        passages = [m.text for m in matches if m.score > SIMILARITY_THRESHOLD and m.text]
        logger.info("Found %d relevant contexts for query", len(passages))
        return Hit(passages)


class LocalKeywordStrategy(SearchStrategy):
    """Substring match over the static seed corpus.  Never misses."""

    name = "keyword"

    def __init__(self, corpus: list[SeedEntry]) -> None:
        self._corpus = corpus

    def search(self, query: str, top_k: int) -> StrategyOutcome:
        return Hit(keyword_search(self._corpus, query, top_k))
