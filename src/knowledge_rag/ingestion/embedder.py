"""Embedding gateway — text → vector calls behind a provider-neutral interface.

Calls return :class:`~knowledge_rag.outcomes.Success` or
:class:`~knowledge_rag.outcomes.Unavailable`; provider errors are logged
and absorbed here, never raised to the pipeline.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from knowledge_rag.outcomes import Outcome, Success, Unavailable

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from knowledge_rag.config import Settings

logger = logging.getLogger(__name__)


class EmbeddingGateway(ABC):
    """Backend-agnostic embedding interface."""

    provider_name: str = "embedding"

    @abstractmethod
    def embed(self, text: str) -> Outcome[list[float]]:
        """Embed a single text."""
        ...

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> Outcome[list[list[float]]]:
        """Embed *texts* in one provider call.

        The i-th vector of a :class:`Success` corresponds to ``texts[i]``.
        """
        ...

    def is_available(self) -> bool:
        """Return ``True`` when the provider is configured."""
        return True


class LangChainEmbeddingGateway(EmbeddingGateway):
    """Gateway over any LangChain :class:`Embeddings` implementation.

    Parameters
    ----------
    embeddings:
        The LangChain embeddings client, or ``None`` when the provider is
        not configured (every call then returns :class:`Unavailable`).
    provider_name:
        Label used in logs and outcomes.
    """

    def __init__(self, embeddings: Embeddings | None, *, provider_name: str = "openai") -> None:
        self._embeddings = embeddings
        self.provider_name = provider_name

    def is_available(self) -> bool:
        return self._embeddings is not None

    def embed(self, text: str) -> Outcome[list[float]]:
        if self._embeddings is None:
            logger.warning("Cannot create embedding - %s client not available", self.provider_name)
            return Unavailable("client not configured", self.provider_name)
        try:
            vector = self._embeddings.embed_query(text)
        except Exception as exc:
            logger.error("Failed to create embedding: %s", exc)
            return Unavailable(str(exc), self.provider_name)
        logger.debug("Created embedding for text (%d chars)", len(text))
        return Success(vector)

    def embed_batch(self, texts: list[str]) -> Outcome[list[list[float]]]:
        if self._embeddings is None:
            logger.warning("Cannot create embeddings - %s client not available", self.provider_name)
            return Unavailable("client not configured", self.provider_name)
        if not texts:
            return Success([])
        try:
            vectors = self._embeddings.embed_documents(texts)
        except Exception as exc:
            logger.error("Failed to create %d embeddings: %s", len(texts), exc)
            return Unavailable(str(exc), self.provider_name)
        logger.info("Created %d embeddings", len(vectors))
        return Success(vectors)


def get_embedding_gateway(config: Settings) -> LangChainEmbeddingGateway:
    """Build the configured embedding gateway.

    ``openai`` needs ``OPENAI_API_KEY``; without it the gateway is
    returned in the unavailable state.  ``huggingface`` runs a local
    sentence-transformer and needs the ``local`` extra installed.
    """
    provider = config.embedding_provider.lower()
    if provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return LangChainEmbeddingGateway(
            HuggingFaceEmbeddings(
                model_name=config.embedding_model,
                encode_kwargs={"normalize_embeddings": True},
            ),
            provider_name="huggingface",
        )
    if provider != "openai":
        raise ValueError(f"Unsupported embedding_provider={provider!r}. Choose from: openai, huggingface.")

    if not config.openai_api_key:
        logger.warning("OpenAI API key not configured; embeddings unavailable")
        return LangChainEmbeddingGateway(None, provider_name="openai")

    from langchain_openai import OpenAIEmbeddings

    return LangChainEmbeddingGateway(
        OpenAIEmbeddings(model=config.embedding_model, api_key=config.openai_api_key),
        provider_name="openai",
    )
