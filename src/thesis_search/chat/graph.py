"""
Graph construction with dependency injection.

The graph is just WIRING - all logic lives in nodes.

Graph structure:
START -> rewrite_query -> retrieve_context -+-> build_context -> generate_answer -> respond -> END
                                            |
                                            +-> no_results -> END
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from langgraph.graph import END, StateGraph

from thesis_search.chat.nodes import (
    build_context_node,
    create_generate_node,
    create_retrieve_node,
    create_rewrite_node,
    respond_no_results,
    respond_with_sources,
    route_after_retrieval,
)
from thesis_search.chat.state import ChatState

if TYPE_CHECKING:
    from thesis_search.chat.query_rewriter import QueryRewriter
    from thesis_search.config import SearchConfig
    from thesis_search.core import EmbeddingProvider, TextGenerator
    from thesis_search.retrieval.engine import RetrievalEngine


def build_chat_graph(
    engine: RetrievalEngine,
    embeddings: EmbeddingProvider,
    generator: TextGenerator,
    config: SearchConfig,
    rewriter: QueryRewriter | None = None,
):
    """
    Build the RAG workflow for one chat turn.

    Args:
        engine: RetrievalEngine used for the retrieve stage
        embeddings: EmbeddingProvider for the search query
        generator: TextGenerator for the grounded answer
        config: SearchConfig (answer temperature / token budget)
        rewriter: optional QueryRewriter; None searches the raw message

    Returns:
        Compiled StateGraph ready for invocation

    Example:
        # Testing
        store = InMemoryDocumentStore()
        engine = RetrievalEngine(store, config)
        graph = build_chat_graph(engine, MockEmbeddings(), MockTextGenerator(), config)
    """
    workflow = StateGraph(ChatState)

    workflow.add_node("rewrite_query", create_rewrite_node(rewriter))
    workflow.add_node("retrieve_context", create_retrieve_node(engine, embeddings))
    workflow.add_node("build_context", build_context_node)
    workflow.add_node("generate_answer", create_generate_node(generator, config))
    workflow.add_node("respond", respond_with_sources)
    workflow.add_node("no_results", respond_no_results)

    workflow.set_entry_point("rewrite_query")
    workflow.add_edge("rewrite_query", "retrieve_context")
    workflow.add_conditional_edges(
        "retrieve_context",
        route_after_retrieval,
        {"build_context": "build_context", "no_results": "no_results"},
    )
    workflow.add_edge("build_context", "generate_answer")
    workflow.add_edge("generate_answer", "respond")
    workflow.add_edge("respond", END)
    workflow.add_edge("no_results", END)

    return workflow.compile()
