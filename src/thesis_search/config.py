"""
Search and chat configuration.

Loads every tunable of the retrieval core from environment variables.
Follows the same shape as the observability config: a dataclass with a
from_env() constructor and a lazily-created module singleton.

The RAG threshold is deliberately independent of the standalone search
threshold; neither is derived from the other.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from thesis_search.core.errors import ConfigurationError

_TRUTHY = ("true", "1", "yes")


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class SearchConfig:
    """Configuration for retrieval, chat and the model/store backends.

    Environment Variables:
        EMBEDDING_DIM: Vector dimensionality D for the collection (default: 384)
        SEARCH_DEFAULT_LIMIT / SEARCH_DEFAULT_THRESHOLD: standalone search (10 / 0.5)
        SIMILAR_DEFAULT_LIMIT: related-document results (default: 5)
        TAG_SEARCH_DEFAULT_LIMIT: tag search page size (default: 10)
        CANDIDATE_MULTIPLIER: indexed search over-fetch factor (default: 10)
        RAG_TOP_K / RAG_THRESHOLD: chat retrieval (3 / 0.3)
        QUERY_REWRITE_ENABLED: rewrite chat messages before retrieval (default: true)
        LLM_PROVIDER: ollama | groq | openai | mock (default: ollama)
        LLM_MODEL: chat model name (provider default if empty)
        EMBEDDING_PROVIDER: ollama | openai | mock (default: ollama)
        EMBEDDING_MODEL: embedding model name (provider default if empty)
        OLLAMA_BASE_URL: Ollama server (default: http://localhost:11434)
        USE_POSTGRES: use the pgvector store instead of memory (default: false)
        DATABASE_URL: PostgreSQL connection string
        DOCUMENT_TABLE: table holding the theses (default: theses)
        REQUEST_TIMEOUT_S: timeout for every external call (default: 30)
    """

    embedding_dim: int = 384

    default_limit: int = 10
    default_threshold: float = 0.5
    similar_limit: int = 5
    tag_search_limit: int = 10
    candidate_multiplier: int = 10

    rag_top_k: int = 3
    rag_threshold: float = 0.3
    rewrite_enabled: bool = True
    rewrite_temperature: float = 0.1
    rewrite_max_tokens: int = 60
    rewrite_history_turns: int = 3
    rewrite_min_length: int = 3
    answer_temperature: float = 0.7
    answer_max_tokens: int = 500
    summary_temperature: float = 0.5
    summary_max_tokens: int = 150

    llm_provider: str = "ollama"
    llm_model: str | None = None
    embedding_provider: str = "ollama"
    embedding_model: str | None = None
    ollama_base_url: str = "http://localhost:11434"

    use_postgres: bool = False
    database_url: str = "postgresql://localhost/thesis_repository"
    document_table: str = "theses"

    request_timeout_s: float = 30.0

    def __post_init__(self) -> None:
        if self.embedding_dim <= 0:
            raise ConfigurationError("embedding_dim must be positive")
        if self.candidate_multiplier < 1:
            raise ConfigurationError("candidate_multiplier must be at least 1")
        if self.request_timeout_s <= 0:
            raise ConfigurationError("request_timeout_s must be positive")

    @classmethod
    def from_env(cls) -> "SearchConfig":
        """Load config from environment variables."""
        return cls(
            embedding_dim=_env_int("EMBEDDING_DIM", 384),
            default_limit=_env_int("SEARCH_DEFAULT_LIMIT", 10),
            default_threshold=_env_float("SEARCH_DEFAULT_THRESHOLD", 0.5),
            similar_limit=_env_int("SIMILAR_DEFAULT_LIMIT", 5),
            tag_search_limit=_env_int("TAG_SEARCH_DEFAULT_LIMIT", 10),
            candidate_multiplier=_env_int("CANDIDATE_MULTIPLIER", 10),
            rag_top_k=_env_int("RAG_TOP_K", 3),
            rag_threshold=_env_float("RAG_THRESHOLD", 0.3),
            rewrite_enabled=_env_bool("QUERY_REWRITE_ENABLED", "true"),
            llm_provider=os.environ.get("LLM_PROVIDER", "ollama").lower(),
            llm_model=os.environ.get("LLM_MODEL") or None,
            embedding_provider=os.environ.get("EMBEDDING_PROVIDER", "ollama").lower(),
            embedding_model=os.environ.get("EMBEDDING_MODEL") or None,
            ollama_base_url=os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434"),
            use_postgres=_env_bool("USE_POSTGRES", "false"),
            database_url=os.environ.get(
                "DATABASE_URL", "postgresql://localhost/thesis_repository"
            ),
            document_table=os.environ.get("DOCUMENT_TABLE", "theses"),
            request_timeout_s=_env_float("REQUEST_TIMEOUT_S", 30.0),
        )


# Global config singleton
_config: SearchConfig | None = None


def get_config() -> SearchConfig:
    """Get the global search config (lazy-loaded from env)."""
    global _config
    if _config is None:
        _config = SearchConfig.from_env()
    return _config


def reset_config() -> None:
    """Reset config (useful for testing)."""
    global _config
    _config = None
