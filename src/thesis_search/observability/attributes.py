"""
Span attribute names for retrieval and chat spans.

GenAI names follow the OpenTelemetry semantic conventions; the rest are
namespaced under "thesis_search.".
"""

from __future__ import annotations

from typing import Any

# GenAI semantic conventions
GEN_AI_SYSTEM = "gen_ai.system"
GEN_AI_REQUEST_MODEL = "gen_ai.request.model"
GEN_AI_REQUEST_TEMPERATURE = "gen_ai.request.temperature"
GEN_AI_REQUEST_MAX_TOKENS = "gen_ai.request.max_tokens"

# Retrieval
RETRIEVAL_PATH = "thesis_search.retrieval.path"
RETRIEVAL_LIMIT = "thesis_search.retrieval.limit"
RETRIEVAL_THRESHOLD = "thesis_search.retrieval.threshold"
RETRIEVAL_CANDIDATE_POOL = "thesis_search.retrieval.candidate_pool"
RETRIEVAL_RESULT_COUNT = "thesis_search.retrieval.result_count"
RETRIEVAL_FALLBACK_REASON = "thesis_search.retrieval.fallback_reason"

# Chat
CHAT_QUERY = "thesis_search.chat.query"
CHAT_QUERY_REWRITTEN = "thesis_search.chat.query_rewritten"
CHAT_HISTORY_LENGTH = "thesis_search.chat.history_length"
CHAT_SOURCE_COUNT = "thesis_search.chat.source_count"
CHAT_OUTCOME = "thesis_search.chat.outcome"


def retrieval_attributes(
    limit: int,
    threshold: float | None,
    candidate_pool: int | None = None,
) -> dict[str, Any]:
    attrs: dict[str, Any] = {RETRIEVAL_LIMIT: limit}
    if threshold is not None:
        attrs[RETRIEVAL_THRESHOLD] = threshold
    if candidate_pool is not None:
        attrs[RETRIEVAL_CANDIDATE_POOL] = candidate_pool
    return attrs


def generation_attributes(
    model: str | None,
    temperature: float,
    max_tokens: int,
    system: str | None = None,
) -> dict[str, Any]:
    attrs: dict[str, Any] = {
        GEN_AI_REQUEST_TEMPERATURE: temperature,
        GEN_AI_REQUEST_MAX_TOKENS: max_tokens,
    }
    if model:
        attrs[GEN_AI_REQUEST_MODEL] = model
    if system:
        attrs[GEN_AI_SYSTEM] = system
    return attrs
