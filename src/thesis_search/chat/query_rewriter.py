"""
Query rewriter - turns a chat utterance into a better search query.

Rewriting is an optimization, never a requirement: any failure, and any
output too short to be useful, falls back to the user's own words. The
rewriter never raises.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Sequence

from thesis_search.chat.prompts import REWRITE_INSTRUCTIONS

if TYPE_CHECKING:
    from thesis_search.config import SearchConfig
    from thesis_search.core import ConversationTurn, TextGenerator

logger = logging.getLogger(__name__)

_QUOTES = "\"'`“”‘’"
_LABEL = re.compile(r"^(?:optimi[sz]ed\s+)?(?:search\s+)?query\s*:\s*", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def build_rewrite_prompt(
    utterance: str,
    history: Sequence[ConversationTurn],
    max_turns: int = 3,
) -> str:
    """Instruction block + last `max_turns` turns + the raw utterance."""
    parts = [REWRITE_INSTRUCTIONS, ""]

    recent = list(history)[-max_turns:] if max_turns > 0 else []
    if recent:
        parts.append("Recent conversation:")
        for turn in recent:
            speaker = "User" if turn.role == "user" else "Assistant"
            parts.append(f"{speaker}: {turn.content}")
        parts.append("")

    parts.append(f"User message: {utterance}")
    parts.append("")
    parts.append("Search query:")
    return "\n".join(parts)


def clean_rewritten_query(raw: str) -> str:
    """Trim, drop a leading label, strip wrapping quotes, flatten whitespace."""
    text = _WHITESPACE.sub(" ", raw).strip()
    text = _LABEL.sub("", text)
    while len(text) >= 2 and text[0] in _QUOTES and text[-1] in _QUOTES:
        text = text[1:-1].strip()
    return text


class QueryRewriter:
    """LLM-backed rewriter with a guaranteed fallback to the original text."""

    def __init__(self, generator: TextGenerator, config: SearchConfig):
        self._generator = generator
        self.config = config

    def rewrite(self, utterance: str, history: Sequence[ConversationTurn] = ()) -> str:
        try:
            prompt = build_rewrite_prompt(
                utterance, history, max_turns=self.config.rewrite_history_turns
            )
            raw = self._generator.generate(
                prompt,
                temperature=self.config.rewrite_temperature,
                max_tokens=self.config.rewrite_max_tokens,
            )
            cleaned = clean_rewritten_query(raw or "")
        except Exception as e:
            logger.warning(f"Query rewrite failed, using original message: {e}")
            return utterance

        if len(cleaned) < self.config.rewrite_min_length:
            logger.info("Query rewrite produced nothing usable, using original message")
            return utterance

        logger.info(f'Rewrote query "{utterance}" -> "{cleaned}"')
        return cleaned
