"""
Tracing settings, read from PHOENIX_* environment variables.

PHOENIX_ENABLED             turn tracing on (default: false)
PHOENIX_PROJECT_NAME        project shown in the Phoenix UI
PHOENIX_COLLECTOR_ENDPOINT  remote OTLP endpoint; a local Phoenix app is launched if empty
PHOENIX_CAPTURE_QUERY_TEXT  put raw chat messages on spans (default: false)
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from thesis_search.config import _env_bool


@dataclass(frozen=True)
class TracingConfig:
    enabled: bool = False
    project_name: str = "thesis-search"
    collector_endpoint: str | None = None
    capture_query_text: bool = False

    @classmethod
    def from_env(cls) -> TracingConfig:
        return cls(
            enabled=_env_bool("PHOENIX_ENABLED", "false"),
            project_name=os.environ.get("PHOENIX_PROJECT_NAME") or "thesis-search",
            collector_endpoint=os.environ.get("PHOENIX_COLLECTOR_ENDPOINT") or None,
            capture_query_text=_env_bool("PHOENIX_CAPTURE_QUERY_TEXT", "false"),
        )


_tracing_config: TracingConfig | None = None


def get_tracing_config() -> TracingConfig:
    global _tracing_config
    if _tracing_config is None:
        _tracing_config = TracingConfig.from_env()
    return _tracing_config


def reset_tracing_config() -> None:
    global _tracing_config
    _tracing_config = None
