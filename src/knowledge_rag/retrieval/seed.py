"""Static seed corpus — bootstrap knowledge and the local search fallback."""

from __future__ import annotations

import json
import logging
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, TypeAdapter

logger = logging.getLogger(__name__)

_BUNDLED_CORPUS = "seed_knowledge.json"


class SeedEntry(BaseModel):
    """One fixed topic/content record of the seed corpus."""

    model_config = ConfigDict(frozen=True)

    id: str
    category: str = "general"
    topic: str = "general"
    content: str


_ENTRIES = TypeAdapter(list[SeedEntry])


def load_seed_corpus(path: str | Path | None = None) -> list[SeedEntry]:
    """Load the seed corpus from *path*, or the bundled JSON when *path* is empty."""
    if path:
        raw = Path(path).read_text(encoding="utf-8")
        source = str(path)
    else:
        raw = resources.files("knowledge_rag.data").joinpath(_BUNDLED_CORPUS).read_text(encoding="utf-8")
        source = _BUNDLED_CORPUS
    entries = _ENTRIES.validate_python(json.loads(raw))
    logger.info("Loaded %d seed entries from %s", len(entries), source)
    return entries


def keyword_search(corpus: list[SeedEntry], query: str, top_k: int = 5) -> list[str]:
    """Case-insensitive substring match of *query* against content or topic.

    Returns up to *top_k* contents in corpus order.
    """
    needle = query.lower()
    hits = [
        entry.content
        for entry in corpus
        if needle in entry.content.lower() or needle in entry.topic.lower()
    ]
    return hits[:top_k]
