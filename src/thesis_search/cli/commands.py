"""
CLI commands - thin wrappers over the retrieval engine and orchestrator.

Each command follows a consistent pattern:
1. Parse arguments
2. Load environment
3. Build services from configuration
4. Print results
5. Return exit code
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Callable

from thesis_search.core.errors import ConfigurationError, ThesisSearchError
from thesis_search.core.protocols import ConversationTurn

EXIT_COMMANDS = ("exit", "quit")

logger = logging.getLogger(__name__)


def _load_env() -> None:
    """Load environment variables from .env and configure logging."""
    from dotenv import load_dotenv

    load_dotenv()
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_orchestrator():
    """
    Wire the orchestrator from the environment.

    The in-memory store starts empty in every process, so it is loaded with
    the sample corpus before use.
    """
    from thesis_search.chat import build_rag_orchestrator
    from thesis_search.config import get_config
    from thesis_search.embeddings import get_embedding_provider
    from thesis_search.observability import init_phoenix
    from thesis_search.retrieval import (
        InMemoryDocumentStore,
        get_document_store,
        seed_document_store,
    )

    init_phoenix()
    config = get_config()
    store = get_document_store(config)
    embeddings = get_embedding_provider(config)

    if isinstance(store, InMemoryDocumentStore) and len(store) == 0:
        count = seed_document_store(store, embeddings)
        logger.info(f"Loaded {count} sample theses into the in-memory store")

    return build_rag_orchestrator(config, store=store, embeddings=embeddings)


def _require_persistent_store(config, command: str) -> None:
    if not config.use_postgres:
        raise ConfigurationError(
            f"{command} writes to PostgreSQL; set USE_POSTGRES=true. "
            "Without it every command runs on a fresh in-memory sample corpus."
        )


def _print_json(payload) -> None:
    print(json.dumps(payload, indent=2, default=str))


# ---------------------------------------------------------------------------
# COMMANDS
# ---------------------------------------------------------------------------


def run_search_cli(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="thesis-search search", description="Semantic search")
    parser.add_argument("query", help="Free-text search query")
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--threshold", type=float, default=None)
    parser.add_argument("--json", action="store_true", help="Print raw JSON")
    args = parser.parse_args(argv)

    engine = _build_orchestrator().engine
    results = engine.search_text(args.query, limit=args.limit, threshold=args.threshold)

    if args.json:
        _print_json([r.to_dict() for r in results])
        return 0

    if not results:
        print("No matching theses.")
        return 0
    for rank, doc in enumerate(results, start=1):
        print(f"{rank:>2}. [{doc.score:.3f}] {doc.title}")
        print(f"    id={doc.id}  tags={', '.join(doc.tags)}")
    return 0


def run_similar_cli(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="thesis-search similar", description="Related theses")
    parser.add_argument("document_id")
    parser.add_argument("--limit", type=int, default=None)
    args = parser.parse_args(argv)

    engine = _build_orchestrator().engine
    for doc in engine.find_similar(args.document_id, limit=args.limit):
        print(f"[{doc.score:.3f}] {doc.title} ({doc.id})")
    return 0


def run_tag_cli(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="thesis-search tag", description="Theses by tag")
    parser.add_argument("tag")
    parser.add_argument("--limit", type=int, default=None)
    parser.add_argument("--skip", type=int, default=0)
    args = parser.parse_args(argv)

    engine = _build_orchestrator().engine
    for doc in engine.search_by_tag(args.tag, limit=args.limit, skip=args.skip):
        print(f"{doc.created_at:%Y-%m-%d}  {doc.title} ({doc.id})")
    return 0


def run_tags_cli(argv: list[str]) -> int:
    argparse.ArgumentParser(prog="thesis-search tags", description="List all tags").parse_args(argv)

    engine = _build_orchestrator().engine
    for tag in engine.get_all_tags():
        print(tag)
    return 0


def run_suggest_cli(argv: list[str]) -> int:
    argparse.ArgumentParser(
        prog="thesis-search suggest", description="Suggested chat questions"
    ).parse_args(argv)

    for question in _build_orchestrator().get_suggested_questions():
        print(f"- {question}")
    return 0


def run_summarize_cli(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="thesis-search summarize", description="Summarize a thesis")
    parser.add_argument("document_id")
    args = parser.parse_args(argv)

    print(_build_orchestrator().summarize_document(args.document_id))
    return 0


def run_seed_cli(argv: list[str]) -> int:
    argparse.ArgumentParser(
        prog="thesis-search seed", description="Load the sample thesis corpus"
    ).parse_args(argv)

    from thesis_search.config import get_config
    from thesis_search.embeddings import get_embedding_provider
    from thesis_search.retrieval import get_document_store, seed_document_store

    config = get_config()
    _require_persistent_store(config, "seed")
    store = get_document_store(config)
    store.create_schema()
    count = seed_document_store(store, get_embedding_provider(config))
    print(f"Seeded {count} theses")
    return 0


def run_reembed_cli(argv: list[str]) -> int:
    argparse.ArgumentParser(
        prog="thesis-search reembed", description="Re-embed every stored thesis"
    ).parse_args(argv)

    from thesis_search.config import get_config
    from thesis_search.embeddings import get_embedding_provider
    from thesis_search.retrieval import get_document_store, reembed_documents

    config = get_config()
    _require_persistent_store(config, "reembed")
    succeeded, failed = reembed_documents(
        get_document_store(config), get_embedding_provider(config), config.embedding_dim
    )
    print("=" * 60)
    print(f"Re-embedded: {succeeded}")
    print(f"Failed:      {failed}")
    print("=" * 60)
    return 0 if failed == 0 else 1


def run_health_cli(argv: list[str]) -> int:
    """Check that the configured embedding and generation backends answer."""
    argparse.ArgumentParser(
        prog="thesis-search health", description="Check AI backend reachability"
    ).parse_args(argv)

    from thesis_search.config import get_config
    from thesis_search.embeddings import get_embedding_provider
    from thesis_search.generation import get_text_generator

    config = get_config()
    checks = {
        f"embeddings ({config.embedding_provider})": get_embedding_provider(config).check_health(),
        f"generation ({config.llm_provider})": get_text_generator(config).check_health(),
    }

    for name, healthy in checks.items():
        print(f"{name:<30} {'OK' if healthy else 'UNREACHABLE'}")
    return 0 if all(checks.values()) else 1


def run_chat_cli(
    argv: list[str],
    input_fn: Callable[[str], str] = input,
) -> int:
    """Interactive RAG chat. Type 'clear' to reset history, 'exit' to quit."""
    parser = argparse.ArgumentParser(prog="thesis-search chat", description="Chat with the repository")
    parser.add_argument("--top-k", type=int, default=None)
    args = parser.parse_args(argv)

    orchestrator = _build_orchestrator()
    history: tuple[ConversationTurn, ...] = ()

    print("=" * 60)
    print("THESIS REPOSITORY CHAT  (type 'exit' to quit, 'clear' to reset)")
    print("=" * 60)
    for question in orchestrator.get_suggested_questions():
        print(f"  - {question}")

    while True:
        try:
            message = input_fn("\nYou: ").strip()
        except EOFError:
            break

        if not message:
            continue
        if message.lower() in EXIT_COMMANDS:
            break
        if message.lower() == "clear":
            history = ()
            print("Conversation cleared.")
            continue

        try:
            result = orchestrator.process_chat_message(message, history, top_k=args.top_k)
        except ThesisSearchError as e:
            print(f"Error: {e}")
            continue

        history = result.updated_history
        print(f"\nAssistant: {result.answer}")
        if result.sources:
            print("\nSources:")
            for number, source in enumerate(result.sources, start=1):
                print(f"  [{number}] {source.title} ({source.relevance_score:.2f})")

    print("Goodbye!")
    return 0


COMMANDS: dict[str, Callable[[list[str]], int]] = {
    "search": run_search_cli,
    "similar": run_similar_cli,
    "tag": run_tag_cli,
    "tags": run_tags_cli,
    "chat": run_chat_cli,
    "suggest": run_suggest_cli,
    "summarize": run_summarize_cli,
    "seed": run_seed_cli,
    "reembed": run_reembed_cli,
    "health": run_health_cli,
}


def main(argv: list[str] | None = None) -> int:
    """
    Main CLI entry point with subcommands.

    Usage:
        thesis-search search "graph neural networks" --limit 5
        thesis-search similar <id>
        thesis-search tag nlp
        thesis-search chat
        thesis-search seed
    """
    _load_env()

    parser = argparse.ArgumentParser(
        description="Thesis repository semantic search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  search      Semantic search over titles and abstracts
  similar     Theses related to a given thesis
  tag         Theses whose tags match a term
  tags        List every tag
  chat        Interactive retrieval-augmented chat
  suggest     Suggested chat questions
  summarize   AI summary of one thesis
  seed        Load the sample corpus
  reembed     Re-embed every stored thesis
  health      Check the AI backends are reachable
        """,
    )
    parser.add_argument("command", choices=sorted(COMMANDS), help="Command to run")

    args, remaining = parser.parse_known_args(sys.argv[1:] if argv is None else argv)

    try:
        return COMMANDS[args.command](remaining)
    except ThesisSearchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130


if __name__ == "__main__":
    sys.exit(main())
