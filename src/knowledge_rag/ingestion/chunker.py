"""Sentence-bounded text chunking.

Chunks never split a sentence.  A sentence longer than ``max_length`` is
passed through as its own oversized chunk rather than truncated, since
cutting it would hand the embedding model a fragment.
"""

from __future__ import annotations

import hashlib
import re

from knowledge_rag.ingestion.models import Chunk, SourceDocument
from knowledge_rag.ingestion.normalizer import normalize_url

DEFAULT_MAX_LENGTH = 900

# A run of non-terminal characters closed by terminal punctuation, or a
# trailing run with no punctuation at all.  Together they cover the input.
_SENTENCE_RE = re.compile(r"[^.!?]*[.!?]+|[^.!?]+$")


def split_sentences(text: str) -> list[str]:
    """Split *text* into sentence-like units; ``"".join`` restores the input."""
    return _SENTENCE_RE.findall(text)


def chunk_text(text: str, max_length: int = DEFAULT_MAX_LENGTH) -> list[str]:
    """Greedily pack sentences into chunks of at most *max_length* characters.

    Parameters
    ----------
    text:
        Normalised input text.
    max_length:
        Character budget per chunk.

    Returns
    -------
    list[str]
        Ordered, non-empty, stripped chunks.  Deterministic for a given
        ``(text, max_length)``.
    """
    if max_length < 1:
        raise ValueError(f"max_length must be >= 1, got {max_length}")

    chunks: list[str] = []
    current = ""
    for sentence in split_sentences(text):
        if current and len(current) + len(sentence) > max_length:
            _flush(current, chunks)
            current = sentence
        else:
            current += sentence
    _flush(current, chunks)
    return chunks


def _flush(buffer: str, chunks: list[str]) -> None:
    stripped = buffer.strip()
    if stripped:
        chunks.append(stripped)


def chunk_id(source_url: str, index: int, namespace: str = "kb") -> str:
    """Deterministic vector id for chunk *index* of *source_url*.

    Re-ingesting the same source yields the same ids, so the vector
    store overwrites instead of appending.
    """
    digest = hashlib.sha1(normalize_url(source_url).encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}:{index}"


def build_chunks(
    document: SourceDocument,
    max_length: int = DEFAULT_MAX_LENGTH,
    namespace: str = "kb",
) -> list[Chunk]:
    """Chunk *document* and attach ids plus position metadata."""
    parts = chunk_text(document.text, max_length)
    total = len(parts)
    return [
        Chunk(
            id=chunk_id(document.url, idx, namespace),
            text=part,
            source_url=document.url,
            index=idx,
            total=total,
            title=document.title or document.url,
            provider=document.provider,
        )
        for idx, part in enumerate(parts)
    ]
