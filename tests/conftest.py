"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import math
import threading
from typing import Any

import pytest

from knowledge_rag.errors import ProviderUnavailableError, StoreReadError, StoreWriteError
from knowledge_rag.generation.llm import CompletionGateway
from knowledge_rag.ingestion.embedder import EmbeddingGateway
from knowledge_rag.ingestion.models import SourceDocument
from knowledge_rag.ingestion.search import ContentSearchProvider, SearchResult
from knowledge_rag.outcomes import Outcome, Success, Unavailable
from knowledge_rag.retrieval.base import VectorStoreBase
from knowledge_rag.retrieval.models import MetadataFilter, VectorMatch, VectorRecord
from knowledge_rag.retrieval.seed import SeedEntry


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fake gateways ───────────────────────────────────────────────────────


class FakeEmbedder(EmbeddingGateway):
    """Deterministic embedder; individual batch calls can be made to fail.

    Batch calls are numbered from 1 in call order.
    """

    provider_name = "fake"

    def __init__(
        self,
        *,
        available: bool = True,
        fail_batches: set[int] | None = None,
        short_batches: set[int] | None = None,
        raise_batches: set[int] | None = None,
    ) -> None:
        self.available = available
        self.fail_batches = fail_batches or set()
        self.short_batches = short_batches or set()
        self.raise_batches = raise_batches or set()
        self.batch_calls: list[list[str]] = []
        self._lock = threading.Lock()

    @staticmethod
    def vector_for(text: str) -> list[float]:
        return [float(len(text)), float(sum(map(ord, text)) % 101), 1.0]

    def is_available(self) -> bool:
        return self.available

    def embed(self, text: str) -> Outcome[list[float]]:
        if not self.available:
            return Unavailable("no key", self.provider_name)
        return Success(self.vector_for(text))

    def embed_batch(self, texts: list[str]) -> Outcome[list[list[float]]]:
        with self._lock:
            self.batch_calls.append(list(texts))
            call = len(self.batch_calls)
        if not self.available or call in self.fail_batches:
            return Unavailable("provider down", self.provider_name)
        if call in self.raise_batches:
            raise RuntimeError("connection reset")
        vectors = [self.vector_for(t) for t in texts]
        if call in self.short_batches:
            vectors = vectors[:-1]
        return Success(vectors)


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store with exact cosine similarity."""

    provider_name = "memory"

    def __init__(self, *, fail_upsert: bool = False, fail_query: bool = False) -> None:
        self.indexes: dict[str, dict[str, VectorRecord]] = {}
        self.fail_upsert = fail_upsert
        self.fail_query = fail_query
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def ensure_index(self, name: str, dimension: int, metric: str = "cosine") -> None:
        self.calls.append("ensure_index")
        self.indexes.setdefault(name, {})

    def delete_all(self, name: str) -> None:
        self.calls.append("delete_all")
        self.indexes[name] = {}

    def upsert(self, name: str, records: list[VectorRecord]) -> None:
        self.calls.append("upsert")
        if self.fail_upsert:
            raise StoreWriteError("quota exceeded", self.provider_name)
        ids = [record.id for record in records]
        if len(set(ids)) != len(ids):
            raise StoreWriteError("Expected IDs to be unique within one upsert", self.provider_name)
        with self._lock:
            index = self.indexes.setdefault(name, {})
            for record in records:
                index[record.id] = record

    def query(
        self,
        name: str,
        embedding: list[float],
        *,
        top_k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[VectorMatch]:
        if self.fail_query:
            raise StoreReadError("index unreachable", self.provider_name)
        matches = [
            VectorMatch(id=rec.id, score=_cosine(embedding, rec.embedding), metadata=dict(rec.metadata))
            for rec in self.indexes.get(name, {}).values()
        ]
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:top_k]

    def count(self, name: str) -> int:
        return len(self.indexes.get(name, {}))

    def health_check(self) -> bool:
        return True


class CannedVectorStore(InMemoryVectorStore):
    """Returns fixed matches from :meth:`query`, whatever the embedding."""

    def __init__(self, matches: list[VectorMatch] | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.matches = matches or []

    def query(self, name, embedding, *, top_k=5, filters=None):  # noqa: ANN001
        if self.fail_query:
            raise StoreReadError("index unreachable", self.provider_name)
        return self.matches[:top_k]


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class FakeSearchProvider(ContentSearchProvider):
    """Returns canned results per query; queries listed in ``failing`` raise."""

    provider_name = "fake-search"

    def __init__(
        self,
        results: dict[str, list[SearchResult]] | None = None,
        *,
        available: bool = True,
        failing: set[str] | None = None,
    ) -> None:
        self.results = results or {}
        self.available = available
        self.failing = failing or set()
        self.calls: list[tuple[str, int, list[str]]] = []

    def is_available(self) -> bool:
        return self.available

    def search_and_fetch(self, query: str, max_results: int, domains: list[str]) -> list[SearchResult]:
        self.calls.append((query, max_results, domains))
        if query in self.failing:
            raise ProviderUnavailableError("HTTP 503", self.provider_name)
        return self.results.get(query, [])[:max_results]


class FakeCompletion(CompletionGateway):
    """Records prompts and returns a fixed outcome."""

    def __init__(self, outcome: Outcome[str] | None = None, *, raises: Exception | None = None) -> None:
        self.outcome = outcome if outcome is not None else Success("Here is your answer.")
        self.raises = raises
        self.prompts: list[tuple[str, str, str]] = []

    def complete(self, system_prompt: str, context_prompt: str, user_prompt: str) -> Outcome[str]:
        self.prompts.append((system_prompt, context_prompt, user_prompt))
        if self.raises is not None:
            raise self.raises
        return self.outcome


# ── Sample data ─────────────────────────────────────────────────────────


def long_text(topic: str, sentences: int = 12) -> str:
    """Prose comfortably above the minimum content length."""
    return " ".join(
        f"Sentence {i} explains how {topic} works for everyday customers." for i in range(sentences)
    )


@pytest.fixture()
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture()
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture()
def documents() -> list[SourceDocument]:
    return [
        SourceDocument(url="https://www.aven.com/", title="Home", text=long_text("the Aven card"), provider="exa"),
        SourceDocument(url="https://www.aven.com/help", title="Help", text=long_text("support"), provider="exa"),
        SourceDocument(url="https://www.aven.com/legal/terms", title="Terms", text=long_text("billing"), provider="direct"),
    ]


@pytest.fixture()
def seed_corpus() -> list[SeedEntry]:
    return [
        SeedEntry(id="aven-overview", category="general", topic="overview",
                  content="Aven is a fintech company that helps people pay off credit card debt."),
        SeedEntry(id="aven-fees", category="pricing", topic="fees",
                  content="Aven charges no annual fee and a 3% balance transfer fee."),
        SeedEntry(id="aven-app", category="features", topic="mobile app",
                  content="The Aven app lets you make payments and track spending."),
    ]
