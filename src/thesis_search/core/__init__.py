"""
Core module - shared protocols, result types and errors.

USAGE:
------
from thesis_search.core import DocumentStore, EmbeddingProvider, TextGenerator

class MyStore:
    '''Implements DocumentStore protocol.'''
    ...
"""

from thesis_search.core.errors import (
    ThesisSearchError,
    ConfigurationError,
    DimensionMismatch,
    DocumentValidationError,
    EmbeddingServiceError,
    GenerationServiceError,
    IndexUnavailable,
    RetrievalFailure,
    DocumentNotFound,
    NotFound,
    ChatProcessingFailed,
)
from thesis_search.core.protocols import (
    # Protocols
    EmbeddingProvider,
    TextGenerator,
    DocumentStore,
    # Data classes
    IndexedHit,
    ScoredDocument,
    ConversationTurn,
    ConversationHistory,
    ChatSource,
    ChatResult,
    append_turns,
)

__all__ = [
    # Errors
    "ThesisSearchError",
    "ConfigurationError",
    "DimensionMismatch",
    "DocumentValidationError",
    "EmbeddingServiceError",
    "GenerationServiceError",
    "IndexUnavailable",
    "RetrievalFailure",
    "DocumentNotFound",
    "NotFound",
    "ChatProcessingFailed",
    # Protocols
    "EmbeddingProvider",
    "TextGenerator",
    "DocumentStore",
    # Data classes
    "IndexedHit",
    "ScoredDocument",
    "ConversationTurn",
    "ConversationHistory",
    "ChatSource",
    "ChatResult",
    "append_turns",
]
