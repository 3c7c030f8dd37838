"""Chroma implementation of the vector-store abstraction."""

from __future__ import annotations

import logging
import time
from typing import Any

import chromadb

from knowledge_rag.errors import StoreReadError, StoreWriteError
from knowledge_rag.retrieval.base import VectorStoreBase
from knowledge_rag.retrieval.models import MetadataFilter, VectorMatch, VectorRecord

logger = logging.getLogger(__name__)

# Accept the usual metric spellings; Chroma only knows its own three.
_METRIC_MAP = {
    "cosine": "cosine",
    "euclidean": "l2",
    "l2": "l2",
    "dotproduct": "ip",
    "ip": "ip",
}

_READY_POLL_INTERVAL = 0.5


def _build_chroma_where(filters: list[MetadataFilter]) -> dict[str, Any] | None:
    """Convert a list of :class:`MetadataFilter` to Chroma ``where`` syntax."""
    if not filters:
        return None

    _OP_MAP = {
        "eq": "$eq",
        "ne": "$ne",
        "gt": "$gt",
        "gte": "$gte",
        "lt": "$lt",
        "lte": "$lte",
        "in": "$in",
        "nin": "$nin",
    }

    clauses: list[dict[str, Any]] = []
    for f in filters:
        chroma_op = _OP_MAP.get(f.operator)
        if chroma_op is None:
            raise ValueError(f"Unsupported filter operator: {f.operator!r}")
        clauses.append({f.field: {chroma_op: f.value}})

    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


def _distance_to_score(distance: float, space: str) -> float:
    """Turn a Chroma distance into a similarity score (higher = closer).

    Cosine distance is ``1 - cos``, so ``1 - d`` recovers the cosine
    similarity the retrieval threshold is expressed in.
    """
    if space == "l2":
        return 1.0 / (1.0 + distance)
    return 1.0 - distance


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed vector store.

    Parameters
    ----------
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    client:
        Pre-built Chroma client.  When *None*, an ``HttpClient`` is created
        on first use.
    ready_timeout:
        Seconds :meth:`ensure_index` waits for the server to report ready.
    """

    provider_name = "chroma"

    def __init__(
        self,
        *,
        host: str = "localhost",
        port: int = 8000,
        client: Any | None = None,
        ready_timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._client = client
        self._ready_timeout = ready_timeout
        self._collections: dict[str, Any] = {}

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = chromadb.HttpClient(host=self._host, port=self._port)
            logger.info("Chroma client initialised (%s:%d)", self._host, self._port)
        return self._client

    # -- VectorStoreBase overrides --------------------------------------------

    def ensure_index(self, name: str, dimension: int, metric: str = "cosine") -> None:
        space = _METRIC_MAP.get(metric)
        if space is None:
            raise ValueError(f"Unsupported metric {metric!r}. Choose from: {sorted(_METRIC_MAP)}")
        try:
            self._wait_until_ready()
            collection = self.client.get_or_create_collection(
                name=name,
                metadata={"hnsw:space": space, "dimension": dimension},
            )
        except StoreWriteError:
            raise
        except Exception as exc:
            raise StoreWriteError(f"Failed to create index {name}: {exc}", self.provider_name) from exc
        self._collections[name] = collection
        logger.info("Index %s ready (dimension=%d, space=%s)", name, dimension, space)

    def delete_all(self, name: str) -> None:
        try:
            collection = self._collection(name)
            ids = collection.get(include=[])["ids"]
            step = self.client.get_max_batch_size()
            for start in range(0, len(ids), step):
                collection.delete(ids=ids[start : start + step])
        except Exception as exc:
            raise StoreWriteError(f"Failed to delete vectors from {name}: {exc}", self.provider_name) from exc
        logger.info("Deleted %d vectors from index %s", len(ids), name)

    def upsert(self, name: str, records: list[VectorRecord]) -> None:
        if not records:
            return
        try:
            self._collection(name).upsert(
                ids=[r.id for r in records],
                embeddings=[r.embedding for r in records],
                documents=[r.text for r in records],
                metadatas=[dict(r.metadata) for r in records],
            )
        except Exception as exc:
            raise StoreWriteError(f"Failed to upsert {len(records)} vectors: {exc}", self.provider_name) from exc
        logger.info("Upserted %d vectors to %s", len(records), name)

    def query(
        self,
        name: str,
        embedding: list[float],
        *,
        top_k: int = 5,
        filters: list[MetadataFilter] | None = None,
    ) -> list[VectorMatch]:
        where = _build_chroma_where(filters) if filters else None
        try:
            collection = self._collection(name)
            results = collection.query(
                query_embeddings=[embedding],
                n_results=top_k,
                where=where,
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise StoreReadError(f"Failed to query {name}: {exc}", self.provider_name) from exc

        space = (collection.metadata or {}).get("hnsw:space", "l2")
        ids = results.get("ids", [[]])[0]
        docs = results.get("documents", [[]])[0]
        metas = results.get("metadatas", [[]])[0]
        distances = results.get("distances", [[]])[0]

        matches: list[VectorMatch] = []
        for doc_id, content, meta, dist in zip(ids, docs, metas, distances):
            metadata = dict(meta or {})
            metadata.setdefault("text", content or "")
            matches.append(VectorMatch(id=doc_id, score=_distance_to_score(dist, space), metadata=metadata))
        logger.info("Queried %s, found %d matches", name, len(matches))
        return matches

    def count(self, name: str) -> int:
        try:
            return self._collection(name).count()
        except Exception as exc:
            raise StoreReadError(f"Failed to count {name}: {exc}", self.provider_name) from exc

    def health_check(self) -> bool:
        try:
            self.client.heartbeat()
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False

    # -- internals ------------------------------------------------------------

    def _collection(self, name: str) -> Any:
        if name not in self._collections:
            self._collections[name] = self.client.get_collection(name)
        return self._collections[name]

    def _wait_until_ready(self) -> None:
        deadline = time.monotonic() + self._ready_timeout
        while not self.health_check():
            if time.monotonic() >= deadline:
                raise StoreWriteError(
                    f"Chroma at {self._host}:{self._port} not ready after {self._ready_timeout:.0f}s",
                    self.provider_name,
                )
            time.sleep(_READY_POLL_INTERVAL)
