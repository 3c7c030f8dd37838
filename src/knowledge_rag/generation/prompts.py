"""Prompt templates for grounded support answers.

Keeping prompts in one place makes them easy to audit and version.  The
support persona is parameterised by topic and support contact so the
same templates serve any knowledge base.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from langchain_core.messages import HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from knowledge_rag.generation.responder import ChatTurn

# Shown to the model when retrieval found nothing.
NO_CONTEXT_MARKER = "No specific information found in knowledge base."

# Only the most recent turns are replayed to the model.
HISTORY_WINDOW = 4


# ── 1. System persona ─────────────────────────────────────────────────

SUPPORT_SYSTEM = """\
You are an AI customer support agent for {topic}.
Be helpful, professional, and empathetic. Use the provided context to answer questions accurately.
If you don't have specific information, provide general guidance and suggest contacting {topic} support at {support_contact}.
"""


def build_system_prompt(topic: str, support_contact: str) -> str:
    """Render the support persona for *topic*."""
    return SUPPORT_SYSTEM.format(topic=topic.title(), support_contact=support_contact)


# ── 2. Context and user turn ──────────────────────────────────────────


def build_context_prompt(passages: Sequence[str]) -> str:
    """Join retrieved passages by blank lines, or the no-context marker."""
    if not passages:
        return NO_CONTEXT_MARKER
    return "\n\n".join(passages)


def build_user_prompt(query: str, history: Sequence[ChatTurn] | None = None) -> str:
    """``User Question: …`` followed by the last few conversation turns."""
    prompt = f"User Question: {query}"
    if history:
        recent = list(history)[-HISTORY_WINDOW:]
        prompt += "\n\nPrevious conversation:\n" + "\n".join(f"{turn.role}: {turn.content}" for turn in recent)
    return prompt


def build_messages(system_prompt: str, context_prompt: str, user_prompt: str) -> list[BaseMessage]:
    """Assemble chat messages: persona, then knowledge-base context, then the user turn.

    The context message is omitted when *context_prompt* is empty.
    """
    messages: list[BaseMessage] = [SystemMessage(content=system_prompt)]
    if context_prompt:
        messages.append(SystemMessage(content=f"Relevant information from our knowledge base:\n{context_prompt}"))
    messages.append(HumanMessage(content=user_prompt))
    return messages


# ── 3. Suggested questions ────────────────────────────────────────────

SUGGESTED_QUESTIONS: dict[str, list[str]] = {
    "general": [
        "What is Aven and how does it work?",
        "How can I apply for an Aven credit card?",
        "What are the fees associated with Aven?",
        "How does the balance transfer work?",
        "What cashback rewards does Aven offer?",
    ],
    "account": [
        "How do I check my balance?",
        "How can I make a payment?",
        "Can I increase my credit limit?",
        "How do I update my personal information?",
        "Where can I find my statements?",
    ],
    "support": [
        "How do I report a lost or stolen card?",
        "How can I dispute a charge?",
        "What should I do if I'm having financial difficulties?",
        "How do I contact customer support?",
        "Is my information secure with Aven?",
    ],
    "features": [
        "What debt management tools does Aven offer?",
        "How does the mobile app work?",
        "Can I set up automatic payments?",
        "What security features protect my account?",
        "How do I earn and redeem cashback?",
    ],
}


def suggested_questions(category: str | None = None) -> list[str]:
    """Starter questions for *category*; unknown categories get ``general``."""
    return list(SUGGESTED_QUESTIONS.get(category or "general", SUGGESTED_QUESTIONS["general"]))
