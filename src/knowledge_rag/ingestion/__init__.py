"""
Ingestion — acquire web content, clean it, chunk it and write it to the index.

Flow
----
:class:`~knowledge_rag.ingestion.acquirer.ContentAcquirer` →
:func:`~knowledge_rag.ingestion.chunker.build_chunks` →
:class:`~knowledge_rag.ingestion.embedder.EmbeddingGateway` →
:class:`~knowledge_rag.ingestion.pipeline.IngestionPipeline` (upsert).

Submodules are imported directly; this package does not re-export them.
"""
