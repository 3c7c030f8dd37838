"""Grounded response orchestration — retrieve, prompt, complete.

Usage::

    responder = GroundedResponder(retrieval, completion, support_contact="1-800-AVEN-HLP")
    answer = responder.respond("How do balance transfers work?", history)
    answer.response, answer.contexts

:meth:`GroundedResponder.respond` never raises.  A missing or failed
completion becomes a fixed apology that names the support channel.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pydantic import BaseModel, Field

from knowledge_rag.generation.llm import CompletionGateway
from knowledge_rag.generation.prompts import (
    build_context_prompt,
    build_system_prompt,
    build_user_prompt,
)
from knowledge_rag.outcomes import Success
from knowledge_rag.retrieval.retriever import RetrievalService

logger = logging.getLogger(__name__)

UNAVAILABLE_APOLOGY = (
    "I apologize, but I'm having trouble generating a response right now. "
    "Please try again or contact support at {support_contact} for immediate assistance."
)
TECHNICAL_DIFFICULTIES_APOLOGY = (
    "I apologize for the inconvenience. I'm experiencing technical difficulties. "
    "Please contact support at {support_contact} for assistance, or try again later."
)
QUICK_RESPONSE_FALLBACK = (
    "I'm here to help! However, I'm experiencing some technical issues. "
    "Please contact support at {support_contact} for immediate assistance."
)


class ChatTurn(BaseModel):
    """One prior message in the conversation."""

    role: str
    content: str


class GroundedAnswer(BaseModel):
    """Reply text plus the passages it was grounded on."""

    response: str
    contexts: list[str] = Field(default_factory=list)


class GroundedResponder:
    """Answer user questions from the knowledge base.

    Parameters
    ----------
    retrieval:
        Source of context passages.
    completion:
        Chat completion gateway.
    support_contact:
        Human support channel quoted in the persona and every apology.
    topic:
        Name of the organisation the assistant speaks for.
    context_k:
        Passages retrieved per question.
    """

    def __init__(
        self,
        retrieval: RetrievalService,
        completion: CompletionGateway,
        *,
        support_contact: str,
        topic: str = "aven",
        context_k: int = 5,
    ) -> None:
        self.retrieval = retrieval
        self.completion = completion
        self.support_contact = support_contact
        self.context_k = context_k
        self.system_prompt = build_system_prompt(topic, support_contact)

    def respond(self, query: str, history: Sequence[ChatTurn] | None = None) -> GroundedAnswer:
        """Retrieve context for *query* and generate a grounded reply."""
        try:
            contexts = self.retrieval.search(query, self.context_k)
            outcome = self.completion.complete(
                self.system_prompt,
                build_context_prompt(contexts),
                build_user_prompt(query, history),
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to generate grounded response: %s", exc)
            return GroundedAnswer(
                response=TECHNICAL_DIFFICULTIES_APOLOGY.format(support_contact=self.support_contact),
                contexts=[],
            )

        if isinstance(outcome, Success) and outcome.value:
            logger.info("Generated grounded response from %d passages", len(contexts))
            return GroundedAnswer(response=outcome.value, contexts=contexts)

        logger.warning("Completion unavailable; returning apology")
        return GroundedAnswer(
            response=UNAVAILABLE_APOLOGY.format(support_contact=self.support_contact),
            contexts=contexts,
        )

    def quick_response(self, query: str) -> str:
        """Reply text only, without conversation history."""
        try:
            return self.respond(query).response
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to generate quick response: %s", exc)
            return QUICK_RESPONSE_FALLBACK.format(support_contact=self.support_contact)
