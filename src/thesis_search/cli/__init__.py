"""
CLI module - command-line interface for search, chat and maintenance.
"""

from thesis_search.cli.commands import (
    COMMANDS,
    main,
    run_search_cli,
    run_similar_cli,
    run_tag_cli,
    run_tags_cli,
    run_chat_cli,
    run_suggest_cli,
    run_summarize_cli,
    run_seed_cli,
    run_reembed_cli,
    run_health_cli,
)

__all__ = [
    "COMMANDS",
    "main",
    "run_search_cli",
    "run_similar_cli",
    "run_tag_cli",
    "run_tags_cli",
    "run_chat_cli",
    "run_suggest_cli",
    "run_summarize_cli",
    "run_seed_cli",
    "run_reembed_cli",
    "run_health_cli",
]
