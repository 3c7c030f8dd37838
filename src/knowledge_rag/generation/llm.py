"""Completion gateway — single place to swap chat providers.

Supports two modes:

1. **OpenAI cloud** (default) — set ``OPENAI_API_KEY``.
2. **OpenAI-compatible endpoint** — set ``LLM_BASE_URL`` (vLLM, a proxy,
   a local server).  ``ChatOpenAI`` works unchanged against it.

Without either, the gateway is built in the unavailable state and every
call returns :class:`~knowledge_rag.outcomes.Unavailable`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from knowledge_rag.generation.prompts import build_messages
from knowledge_rag.outcomes import Outcome, Success, Unavailable

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel

    from knowledge_rag.config import Settings

logger = logging.getLogger(__name__)


class CompletionGateway(ABC):
    """Provider-neutral chat completion."""

    provider_name: str = "completion"

    @abstractmethod
    def complete(self, system_prompt: str, context_prompt: str, user_prompt: str) -> Outcome[str]:
        """Generate a reply.

        Parameters
        ----------
        system_prompt:
            Persona and answering rules.
        context_prompt:
            Retrieved knowledge, sent as a second system message.
        user_prompt:
            The user's question plus recent conversation.
        """
        ...


class ChatCompletionGateway(CompletionGateway):
    """Gateway over a LangChain chat model (``ChatOpenAI`` in production).

    Parameters
    ----------
    model:
        The chat model, or ``None`` when no provider is configured.
    provider_name:
        Label used in logs and outcomes.
    """

    def __init__(self, model: BaseChatModel | None, *, provider_name: str = "openai") -> None:
        self._model = model
        self.provider_name = provider_name

    def is_available(self) -> bool:
        return self._model is not None

    def complete(self, system_prompt: str, context_prompt: str, user_prompt: str) -> Outcome[str]:
        if self._model is None:
            logger.warning("Cannot generate response - %s client not available", self.provider_name)
            return Unavailable("client not configured", self.provider_name)
        try:
            reply = self._model.invoke(build_messages(system_prompt, context_prompt, user_prompt))
        except Exception as exc:
            logger.error("Failed to generate response: %s", exc)
            return Unavailable(str(exc), self.provider_name)

        text = reply.content if isinstance(reply.content, str) else ""
        if not text.strip():
            return Unavailable("empty completion", self.provider_name)
        logger.debug("Generated response (%d chars)", len(text))
        return Success(text)


def get_completion_gateway(config: Settings) -> ChatCompletionGateway:
    """Return the configured chat gateway.

    When ``config.llm_base_url`` is set the client is pointed at that
    OpenAI-compatible endpoint; a placeholder key (``"EMPTY"``) is used
    if none is configured, since such servers usually skip auth.
    """
    if not config.openai_api_key and not config.llm_base_url:
        logger.warning("OpenAI API key not configured; completions unavailable")
        return ChatCompletionGateway(None)

    from langchain_openai import ChatOpenAI

    kwargs: dict = {
        "model": config.llm_model_name,
        "temperature": config.llm_temperature,
        "max_tokens": config.llm_max_tokens,
    }
    if config.llm_base_url:
        logger.info("Using OpenAI-compatible endpoint: %s", config.llm_base_url)
        kwargs["base_url"] = config.llm_base_url
        kwargs["api_key"] = config.openai_api_key or "EMPTY"
    else:
        kwargs["api_key"] = config.openai_api_key

    return ChatCompletionGateway(ChatOpenAI(**kwargs))
