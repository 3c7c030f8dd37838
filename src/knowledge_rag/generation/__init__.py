"""
Generation — grounded answers from retrieved knowledge.

Public API
----------
- :class:`GroundedResponder` — retrieve, prompt and complete; never raises.
- :class:`CompletionGateway` / :class:`ChatCompletionGateway` — chat provider seam.
- :func:`get_completion_gateway` — build the configured gateway.
"""

from knowledge_rag.generation.llm import ChatCompletionGateway, CompletionGateway, get_completion_gateway
from knowledge_rag.generation.responder import ChatTurn, GroundedAnswer, GroundedResponder

__all__ = [
    "ChatCompletionGateway",
    "ChatTurn",
    "CompletionGateway",
    "GroundedAnswer",
    "GroundedResponder",
    "get_completion_gateway",
]
