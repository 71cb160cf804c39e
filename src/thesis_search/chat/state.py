"""
Chat state definition - the data flowing through the RAG graph.

Input fields are set at invocation time, intermediate fields are filled
by nodes, output fields hold the turn's result. History values are
tuples: nodes build new ones, never mutate the input.
"""

from __future__ import annotations

from typing import TypedDict

from thesis_search.core.protocols import ChatSource, ConversationHistory, ScoredDocument


class ChatState(TypedDict):
    # -------------------------------------------------------------------------
    # INPUT (set at invocation)
    # -------------------------------------------------------------------------
    message: str
    history: ConversationHistory
    top_k: int
    threshold: float

    # -------------------------------------------------------------------------
    # INTERMEDIATE (populated by nodes)
    # -------------------------------------------------------------------------
    search_query: str
    retrieved_docs: list[ScoredDocument]
    context: str

    # -------------------------------------------------------------------------
    # OUTPUT
    # -------------------------------------------------------------------------
    answer: str
    sources: list[ChatSource]
    updated_history: ConversationHistory

    # -------------------------------------------------------------------------
    # METRICS
    # -------------------------------------------------------------------------
    retrieval_latency_ms: float
    generation_latency_ms: float


def create_initial_state(
    message: str,
    history: ConversationHistory = (),
    top_k: int = 3,
    threshold: float = 0.3,
) -> ChatState:
    """Initial state for one chat turn with every field defaulted."""
    return ChatState(
        message=message,
        history=tuple(history),
        top_k=top_k,
        threshold=threshold,
        search_query=message,
        retrieved_docs=[],
        context="",
        answer="",
        sources=[],
        updated_history=tuple(history),
        retrieval_latency_ms=0.0,
        generation_latency_ms=0.0,
    )
