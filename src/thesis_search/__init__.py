"""
thesis_search - semantic search and retrieval-augmented chat for a thesis repository.

Entry points for the application layer:
- RetrievalEngine.search / search_text / find_similar / search_by_tag
- RAGOrchestrator.process_chat_message / get_suggested_questions / summarize_document
"""

__version__ = "0.1.0"

from thesis_search.config import SearchConfig, get_config, reset_config
from thesis_search.retrieval import RetrievalEngine
from thesis_search.chat import RAGOrchestrator, build_rag_orchestrator

__all__ = [
    "SearchConfig",
    "get_config",
    "reset_config",
    "RetrievalEngine",
    "RAGOrchestrator",
    "build_rag_orchestrator",
]
