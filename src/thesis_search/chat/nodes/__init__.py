"""
RAG graph nodes - isolated, testable functions.

PATTERN:
--------
1. Pure nodes (no dependencies) are simple functions
2. Nodes with dependencies use factory pattern: create_X_node(deps) -> node_fn
"""

from thesis_search.chat.nodes.rewrite import create_rewrite_node
from thesis_search.chat.nodes.retrieve import create_retrieve_node, route_after_retrieval
from thesis_search.chat.nodes.generate import (
    build_context,
    build_context_node,
    build_grounding_prompt,
    create_generate_node,
)
from thesis_search.chat.nodes.respond import respond_no_results, respond_with_sources

__all__ = [
    "create_rewrite_node",
    "create_retrieve_node",
    "route_after_retrieval",
    "build_context",
    "build_context_node",
    "build_grounding_prompt",
    "create_generate_node",
    "respond_no_results",
    "respond_with_sources",
]
