"""
Context and answer nodes.

Prompt construction is split into PURE FUNCTIONS (build_context,
build_grounding_prompt) that can be tested without an LLM. The answer
node only calls the injected generator.

The grounding prompt always carries the user's ORIGINAL message; the
rewritten query is for retrieval only.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Callable, Sequence

from thesis_search.chat.prompts import ANSWER_INSTRUCTIONS, CONTEXT_HEADER
from thesis_search.chat.state import ChatState
from thesis_search.core.errors import ChatProcessingFailed, GenerationServiceError

if TYPE_CHECKING:
    from thesis_search.config import SearchConfig
    from thesis_search.core import ConversationTurn, ScoredDocument, TextGenerator

logger = logging.getLogger(__name__)


def build_context(docs: Sequence[ScoredDocument]) -> str:
    """Numbered, delimited thesis blocks in ranked order."""
    blocks = [CONTEXT_HEADER, ""]
    for number, doc in enumerate(docs, start=1):
        blocks.append(f"[Thesis {number}]")
        blocks.append(f"Title: {doc.title}")
        blocks.append(f"Abstract: {doc.abstract}")
        blocks.append(f"Tags: {', '.join(doc.tags)}")
        blocks.append("---")
    return "\n".join(blocks)


def build_grounding_prompt(
    message: str,
    context: str,
    history: Sequence[ConversationTurn],
) -> str:
    """System instructions + prior turns + context + the original question."""
    parts = [ANSWER_INSTRUCTIONS, "", "Context from the thesis repository:", context, ""]

    if history:
        parts.append("Previous conversation:")
        for turn in history:
            speaker = "User" if turn.role == "user" else "Assistant"
            parts.append(f"{speaker}: {turn.content}")
        parts.append("")

    parts.append(f"User question: {message}")
    parts.append("")
    parts.append("Answer:")
    return "\n".join(parts)


def build_context_node(state: ChatState) -> dict:
    """Pure node: no dependencies."""
    return {"context": build_context(state["retrieved_docs"])}


def create_generate_node(
    generator: TextGenerator,
    config: SearchConfig,
) -> Callable[[ChatState], dict]:
    """Factory that creates the answer node with an injected generator."""

    def generate_answer(state: ChatState) -> dict:
        start = time.time()
        prompt = build_grounding_prompt(state["message"], state["context"], state["history"])

        try:
            answer = generator.generate(
                prompt,
                temperature=config.answer_temperature,
                max_tokens=config.answer_max_tokens,
            )
        except GenerationServiceError as e:
            logger.error(f"Error generating RAG response: {e}")
            raise ChatProcessingFailed("generate", str(e)) from e

        answer = (answer or "").strip()
        if not answer:
            raise ChatProcessingFailed("generate", "model returned an empty answer")

        return {
            "answer": answer,
            "generation_latency_ms": (time.time() - start) * 1000,
        }

    return generate_answer
