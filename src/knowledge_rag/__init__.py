"""Knowledge RAG — web knowledge ingestion, retrieval and grounded answers."""
