"""FastAPI application exposing ingestion, search and grounded chat as a REST API."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from knowledge_rag.config import settings
from knowledge_rag.errors import KnowledgeBaseError
from knowledge_rag.generation import ChatTurn
from knowledge_rag.generation.prompts import suggested_questions
from knowledge_rag.ingestion.models import IngestOptions
from knowledge_rag.services import KnowledgeServices, build_services

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

USAGE_MESSAGE = 'Provide a query parameter "q" to search the knowledge base'

app = FastAPI(
    title="Knowledge RAG API",
    version="0.1.0",
    description="Ingest web knowledge, search it, and answer questions grounded in it.",
)


# ── Service wiring ────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def get_services() -> KnowledgeServices:
    """FastAPI dependency; override in tests via ``app.dependency_overrides``."""
    return build_services(settings)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Request / Response schemas ────────────────────────────────────────


class IngestRequest(BaseModel):
    """Body of ``POST /knowledge/ingest``; every field is optional."""

    model_config = ConfigDict(populate_by_name=True)

    limit: int = Field(default=15, ge=1)
    clear_old: bool = Field(default=False, alias="clearOld")
    chunk_max_length: int = Field(default=900, ge=1, alias="chunkMaxLength")
    batch_size: int = Field(default=100, ge=1, alias="batchSize")


class IngestStatsBody(BaseModel):
    docs: int
    chunks: int
    upserted: int


class IngestResponse(BaseModel):
    success: bool
    message: str
    stats: IngestStatsBody
    timestamp: str


class SearchRequest(BaseModel):
    query: str = ""
    limit: int = Field(default=5, ge=1)


class SearchResponse(BaseModel):
    query: str
    results: list[str]
    count: int
    timestamp: str


class InitResponse(BaseModel):
    success: bool
    message: str
    count: int


class ChatRequest(BaseModel):
    """Incoming question plus optional prior turns."""

    message: str = ""
    history: list[ChatTurn] = Field(default_factory=list)


class ChatResponse(BaseModel):
    """Answer and the passages it was grounded on."""

    response: str
    contexts: list[str]
    timestamp: str


def _failure(error: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"success": False, "error": error, "details": str(exc)})


# ── Routes ────────────────────────────────────────────────────────────


@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/knowledge/ingest", response_model=IngestResponse)
def ingest_knowledge(
    request: IngestRequest | None = None,
    services: KnowledgeServices = Depends(get_services),
) -> Any:
    """Acquire web content and ingest it into the vector index."""
    request = request or IngestRequest()
    logger.info(
        "Ingest request: limit=%d clear_old=%s chunk_max_length=%d batch_size=%d",
        request.limit, request.clear_old, request.chunk_max_length, request.batch_size,
    )
    options = IngestOptions(
        chunk_max_length=request.chunk_max_length,
        batch_size=request.batch_size,
        clear_old=request.clear_old,
    )
    try:
        stats = services.pipeline.ingest_sources(services.acquirer, request.limit, options)
    except KnowledgeBaseError as exc:
        logger.error("Ingestion failed: %s", exc)
        return _failure("Failed to ingest knowledge", exc)

    return IngestResponse(
        success=True,
        message="Ingested knowledge successfully",
        stats=IngestStatsBody(docs=stats.docs, chunks=stats.chunks, upserted=stats.upserted),
        timestamp=_now(),
    )


@app.post("/knowledge/search", response_model=SearchResponse)
def search_knowledge(request: SearchRequest, services: KnowledgeServices = Depends(get_services)) -> Any:
    """Return passages relevant to a query."""
    if not request.query.strip():
        return JSONResponse(status_code=400, content={"error": "Query is required"})
    results = services.retrieval.search(request.query, request.limit)
    logger.info("Found %d results for %r", len(results), request.query)
    return SearchResponse(query=request.query, results=results, count=len(results), timestamp=_now())


@app.get("/knowledge/search", response_model=SearchResponse)
def search_knowledge_get(
    q: str = "",
    limit: int = Query(default=5, ge=1),
    services: KnowledgeServices = Depends(get_services),
) -> Any:
    """Query-string variant of ``POST /knowledge/search``; without ``q`` it returns usage help."""
    if not q.strip():
        return JSONResponse(content={"message": USAGE_MESSAGE})
    return search_knowledge(SearchRequest(query=q, limit=limit), services)


@app.post("/knowledge/init", response_model=InitResponse)
def init_knowledge(services: KnowledgeServices = Depends(get_services)) -> Any:
    """Seed the vector index from the curated seed corpus."""
    try:
        count = services.seed()
    except KnowledgeBaseError as exc:
        logger.error("Seeding failed: %s", exc)
        return _failure("Failed to initialize knowledge base", exc)
    return InitResponse(
        success=True,
        message=f"Knowledge base initialized successfully with {count} vectors",
        count=count,
    )


@app.post("/chat", response_model=ChatResponse)
def chat(request: ChatRequest, services: KnowledgeServices = Depends(get_services)) -> Any:
    """Answer a question grounded in the knowledge base."""
    if not request.message.strip():
        return JSONResponse(status_code=400, content={"error": "Message is required"})
    answer = services.responder.respond(request.message, request.history)
    logger.info("Chat response: %d chars, %d contexts", len(answer.response), len(answer.contexts))
    return ChatResponse(response=answer.response, contexts=answer.contexts, timestamp=_now())


@app.get("/chat/suggestions")
async def chat_suggestions(category: str | None = None) -> dict[str, list[str]]:
    """Starter questions for the chat UI."""
    return {"questions": suggested_questions(category)}
