"""Service graph construction shared by the HTTP app and the KFP components."""

from __future__ import annotations

from dataclasses import dataclass

from knowledge_rag.config import Settings
from knowledge_rag.generation import GroundedResponder, get_completion_gateway
from knowledge_rag.ingestion.acquirer import ContentAcquirer
from knowledge_rag.ingestion.embedder import EmbeddingGateway, get_embedding_gateway
from knowledge_rag.ingestion.pipeline import IngestionPipeline, seed_index
from knowledge_rag.ingestion.search import ExaSearchProvider
from knowledge_rag.retrieval import RetrievalService, SeedEntry, VectorStoreBase, load_seed_corpus


@dataclass
class KnowledgeServices:
    """Process-wide service graph; every handle is built once and shared."""

    config: Settings
    embedder: EmbeddingGateway
    store: VectorStoreBase
    corpus: list[SeedEntry]
    acquirer: ContentAcquirer
    pipeline: IngestionPipeline
    retrieval: RetrievalService
    responder: GroundedResponder

    def seed(self) -> int:
        """Write the seed corpus into the configured index."""
        return seed_index(
            self.embedder,
            self.store,
            self.corpus,
            index_name=self.config.chroma_collection,
            dimension=self.config.embedding_dimension,
            metric=self.config.distance_metric,
        )


def build_services(config: Settings) -> KnowledgeServices:
    """Construct gateways and services from *config*."""
    from knowledge_rag.retrieval.chroma_store import ChromaVectorStore

    embedder = get_embedding_gateway(config)
    store = ChromaVectorStore(
        host=config.chroma_host,
        port=config.chroma_port,
        ready_timeout=config.index_ready_timeout,
    )
    corpus = load_seed_corpus(config.seed_corpus_path or None)
    acquirer = ContentAcquirer(
        ExaSearchProvider(config.exa_api_key, base_url=config.exa_base_url, timeout=config.request_timeout),
        queries=config.search_queries,
        domains=config.search_domains,
        fallback_urls=config.fallback_urls,
    )
    pipeline = IngestionPipeline(
        embedder,
        store,
        index_name=config.chroma_collection,
        dimension=config.embedding_dimension,
        metric=config.distance_metric,
        topic=config.knowledge_topic,
    )
    retrieval = RetrievalService.default(embedder, store, corpus, index_name=config.chroma_collection)
    responder = GroundedResponder(
        retrieval,
        get_completion_gateway(config),
        support_contact=config.support_contact,
        topic=config.knowledge_topic,
    )
    return KnowledgeServices(
        config=config,
        embedder=embedder,
        store=store,
        corpus=corpus,
        acquirer=acquirer,
        pipeline=pipeline,
        retrieval=retrieval,
        responder=responder,
    )
