"""
Serving — FastAPI application for ingestion, search and chat.

Run locally::

    uvicorn knowledge_rag.serving.app:app --port 8080
"""
