"""
Retrieval module - vector similarity search over the thesis repository.

This module provides:
- vector_math: similarity primitives
- Document: the document model
- InMemoryDocumentStore / PgVectorDocumentStore: DocumentStore implementations
- get_document_store(): Factory function
- RetrievalEngine: search, related documents, tag search

ARCHITECTURE:
-------------
1. Protocol defines the contract (in core.protocols)
2. Multiple implementations (PgVectorDocumentStore, InMemoryDocumentStore)
3. Factory function for instantiation
4. Engine depends only on the protocol
"""

from thesis_search.retrieval.document import Document
from thesis_search.retrieval.store import InMemoryDocumentStore, get_document_store
from thesis_search.retrieval.engine import RetrievalEngine, rank_documents
from thesis_search.retrieval.seeds import (
    get_sample_theses,
    seed_document_store,
    reembed_documents,
)

__all__ = [
    "Document",
    "InMemoryDocumentStore",
    "get_document_store",
    "RetrievalEngine",
    "rank_documents",
    "get_sample_theses",
    "seed_document_store",
    "reembed_documents",
]
