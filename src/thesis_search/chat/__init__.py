"""
Chat module - retrieval-augmented chat over the thesis repository.

- state.py: ChatState TypedDict
- query_rewriter.py: QueryRewriter
- nodes/: individual graph nodes
- graph.py: graph construction with DI
- orchestrator.py: RAGOrchestrator public API
"""

from thesis_search.chat.state import ChatState, create_initial_state
from thesis_search.chat.query_rewriter import (
    QueryRewriter,
    build_rewrite_prompt,
    clean_rewritten_query,
)
from thesis_search.chat.graph import build_chat_graph
from thesis_search.chat.orchestrator import RAGOrchestrator, build_rag_orchestrator

__all__ = [
    "ChatState",
    "create_initial_state",
    "QueryRewriter",
    "build_rewrite_prompt",
    "clean_rewritten_query",
    "build_chat_graph",
    "RAGOrchestrator",
    "build_rag_orchestrator",
]
