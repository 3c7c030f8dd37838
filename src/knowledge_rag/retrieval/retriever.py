"""Retrieval service — similarity search with a layered fallback.

Usage::

    from knowledge_rag.retrieval.retriever import RetrievalService

    service  = RetrievalService.default(embedder, store, corpus, index_name="knowledge-base")
    passages = service.search("What is the balance transfer fee?", top_k=5)

The degradation policy is the ``strategies`` tuple: vector search first,
then a keyword match over the seed corpus.  It is a plain value, so tests
and callers can inspect or replace it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from knowledge_rag.ingestion.embedder import EmbeddingGateway
from knowledge_rag.outcomes import Hit
from knowledge_rag.retrieval.base import VectorStoreBase
from knowledge_rag.retrieval.seed import SeedEntry
from knowledge_rag.retrieval.strategies import (
    LocalKeywordStrategy,
    SearchStrategy,
    VectorSearchStrategy,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchOutcome:
    """What a search returned and which strategy produced it.

    Attributes
    ----------
    passages:
        Ordered passage texts, most similar first.
    strategy:
        ``name`` of the strategy that answered, or ``"none"`` if every
        strategy missed.
    misses:
        Reasons reported by the strategies that were skipped.
    """

    passages: list[str]
    strategy: str
    misses: tuple[str, ...] = ()


class RetrievalService:
    """Walk an ordered list of strategies and return the first hit.

    Parameters
    ----------
    strategies:
        Ordered degradation policy.  Usually built with :meth:`default`.
    default_k:
        Result count used when :meth:`search` is called without *top_k*.
    """

    def __init__(self, strategies: Sequence[SearchStrategy], *, default_k: int = 5) -> None:
        if not strategies:
            raise ValueError("RetrievalService needs at least one strategy")
        self.strategies: tuple[SearchStrategy, ...] = tuple(strategies)
        self.default_k = default_k

    @classmethod
    def default(
        cls,
        embedder: EmbeddingGateway,
        store: VectorStoreBase,
        corpus: list[SeedEntry],
        *,
        index_name: str,
        default_k: int = 5,
    ) -> RetrievalService:
        """Vector search over *index_name*, falling back to the seed corpus."""
        return cls(
            [VectorSearchStrategy(embedder, store, index_name), LocalKeywordStrategy(corpus)],
            default_k=default_k,
        )

    # -- public API -----------------------------------------------------------

    def search(self, query: str, top_k: int | None = None) -> list[str]:
        """Return passages relevant to *query*.

        An empty list is a valid answer: nothing cleared the similarity
        threshold.
        """
        return self.search_with_outcome(query, top_k).passages

    def search_with_outcome(self, query: str, top_k: int | None = None) -> SearchOutcome:
        """Same as :meth:`search` but reports which strategy answered."""
        k = top_k if top_k is not None else self.default_k
        if k < 1:
            raise ValueError(f"top_k must be >= 1, got {k}")

        misses: list[str] = []
        for strategy in self.strategies:
            outcome = strategy.search(query, k)
            if isinstance(outcome, Hit):
                if misses:
                    logger.warning("Falling back to %s search after: %s", strategy.name, "; ".join(misses))
                return SearchOutcome(passages=outcome.passages[:k], strategy=strategy.name, misses=tuple(misses))
            misses.append(f"{strategy.name}: {outcome.reason}")

        logger.error("Every retrieval strategy missed for %r", query)
        return SearchOutcome(passages=[], strategy="none", misses=tuple(misses))
