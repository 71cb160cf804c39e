"""
Terminal nodes - assemble the turn's answer, sources and history.

Both are PURE NODES with no dependencies.
"""

from __future__ import annotations

from thesis_search.chat.prompts import NO_RESULTS_ANSWER
from thesis_search.chat.state import ChatState
from thesis_search.core.protocols import ChatSource, ConversationTurn, append_turns


def respond_with_sources(state: ChatState) -> dict:
    """Pair the answer with its sources and append both turns to history."""
    sources = [
        ChatSource(id=doc.id, title=doc.title, tags=list(doc.tags), relevance_score=doc.score)
        for doc in state["retrieved_docs"]
    ]
    history = append_turns(
        state["history"],
        ConversationTurn(role="user", content=state["message"]),
        ConversationTurn(role="assistant", content=state["answer"]),
    )
    return {"sources": sources, "updated_history": history}


def respond_no_results(state: ChatState) -> dict:
    """
    Canned answer when retrieval found nothing.

    Only the user's turn is appended: no assistant turn was generated.
    """
    return {
        "answer": NO_RESULTS_ANSWER,
        "sources": [],
        "updated_history": append_turns(
            state["history"], ConversationTurn(role="user", content=state["message"])
        ),
    }
