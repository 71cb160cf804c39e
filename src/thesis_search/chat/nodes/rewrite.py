"""Rewrite node - turns the chat message into the retrieval query."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from thesis_search.chat.state import ChatState

if TYPE_CHECKING:
    from thesis_search.chat.query_rewriter import QueryRewriter


def create_rewrite_node(
    rewriter: QueryRewriter | None,
) -> Callable[[ChatState], dict]:
    """
    Factory that creates the rewrite node.

    With rewriter=None the message is searched verbatim.
    """

    def rewrite_query(state: ChatState) -> dict:
        if rewriter is None:
            return {"search_query": state["message"]}
        return {"search_query": rewriter.rewrite(state["message"], state["history"])}

    return rewrite_query
