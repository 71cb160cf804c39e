"""
Retrieval node - embeds the search query and ranks theses.

RAG wants recall, so it searches with its own (lower) threshold and a
small top_k taken from state.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable

from thesis_search.chat.state import ChatState
from thesis_search.core.errors import ChatProcessingFailed, RetrievalFailure

if TYPE_CHECKING:
    from thesis_search.core import EmbeddingProvider
    from thesis_search.retrieval.engine import RetrievalEngine

logger = logging.getLogger(__name__)


def create_retrieve_node(
    engine: RetrievalEngine,
    embeddings: EmbeddingProvider,
) -> Callable[[ChatState], dict]:
    """
    Factory that creates the retrieval node with injected engine and embeddings.

    EmbeddingServiceError propagates unchanged; a store failure ends the
    turn as ChatProcessingFailed.
    """

    def retrieve_context(state: ChatState) -> dict:
        start = time.time()

        query_vector = embeddings.embed(state["search_query"])
        try:
            docs = engine.search(
                query_vector, limit=state["top_k"], threshold=state["threshold"]
            )
        except RetrievalFailure as e:
            logger.error(f"Retrieval failed for chat turn: {e}")
            raise ChatProcessingFailed("retrieve", str(e)) from e

        return {
            "retrieved_docs": docs,
            "retrieval_latency_ms": (time.time() - start) * 1000,
        }

    return retrieve_context


def route_after_retrieval(state: ChatState) -> str:
    """Conditional edge: ground an answer, or short-circuit when nothing matched."""
    return "build_context" if state["retrieved_docs"] else "no_results"
