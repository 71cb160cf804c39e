"""
Document store implementations following the protocol pattern.

Pattern: Protocol → Production impl → Test double → Factory

This module contains:
1. InMemoryDocumentStore - dict-backed store (testing/development)
2. get_document_store() - Factory function

The production store lives in retrieval/pgvector_store.py.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import TYPE_CHECKING, Sequence

import numpy as np

from thesis_search.core.errors import DimensionMismatch, IndexUnavailable
from thesis_search.core.protocols import IndexedHit
from thesis_search.retrieval.document import Document
from thesis_search.retrieval.vector_math import dot_product_matrix, stack_vectors

if TYPE_CHECKING:
    from thesis_search.config import SearchConfig
    from thesis_search.core import DocumentStore

logger = logging.getLogger(__name__)


def order_tags_by_frequency(tag_lists: Sequence[Sequence[str]]) -> list[str]:
    """Distinct tags, most frequent first, ties alphabetical."""
    counts = Counter(tag for tags in tag_lists for tag in tags)
    return [tag for tag, _ in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]


# ---------------------------------------------------------------------------
# IN-MEMORY STORE (Testing/Development)
# ---------------------------------------------------------------------------


class InMemoryDocumentStore:
    """
    In-memory document store for development/testing.

    Implements the same interface as PgVectorDocumentStore without Postgres.
    Storage order is insertion order; re-upserting a document keeps its slot.

    index_enabled=False makes indexed_vector_search raise IndexUnavailable,
    which is how a deployment without a vector index behaves.

    With embedding_dim set, upserting a vector of another length raises
    DimensionMismatch, as the vector column of the pgvector table does.
    """

    def __init__(self, index_enabled: bool = True, embedding_dim: int | None = None):
        self.index_enabled = index_enabled
        self.embedding_dim = embedding_dim
        self._documents: dict[str, Document] = {}

    def connect(self) -> None:
        """No-op for in-memory store."""
        pass

    def close(self) -> None:
        """No-op for in-memory store."""
        pass

    def create_schema(self) -> None:
        """No-op for in-memory store."""
        pass

    def __len__(self) -> int:
        return len(self._documents)

    def upsert_document(self, doc: Document) -> None:
        if (
            self.embedding_dim is not None
            and doc.vector is not None
            and len(doc.vector) != self.embedding_dim
        ):
            raise DimensionMismatch(expected=self.embedding_dim, actual=len(doc.vector))
        self._documents[doc.id] = doc

    def upsert_documents(self, docs: Sequence[Document]) -> None:
        for doc in docs:
            self.upsert_document(doc)

    def delete_document(self, document_id: str) -> bool:
        return self._documents.pop(document_id, None) is not None

    def indexed_vector_search(
        self,
        query_vector: np.ndarray,
        candidate_pool_size: int,
        limit: int,
    ) -> list[IndexedHit]:
        """Exact top-K by dot product over the whole collection."""
        if not self.index_enabled:
            raise IndexUnavailable("In-memory vector index is disabled")

        docs = [d for d in self._documents.values() if d.vector is not None]
        if not docs:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        scores = dot_product_matrix(stack_vectors([d.vector for d in docs], query.shape[0]), query)
        # Stable sort keeps insertion order among equal scores
        order = np.argsort(-scores, kind="stable")[: min(candidate_pool_size, limit)]
        return [IndexedHit(document=docs[i], index_score=float(scores[i])) for i in order]

    def all_documents(self) -> list[Document]:
        return list(self._documents.values())

    def find_by_id(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    def find_by_tag_filter(self, tag: str, skip: int, limit: int) -> list[Document]:
        needle = tag.strip().lower()
        matches = [
            doc
            for doc in self._documents.values()
            if any(needle in t.lower() for t in doc.tags)
        ]
        matches.sort(key=lambda d: d.created_at, reverse=True)
        return [doc.without_vector() for doc in matches[skip : skip + limit]]

    def distinct_tags(self) -> list[str]:
        return order_tags_by_frequency([d.tags for d in self._documents.values()])


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_document_store(config: SearchConfig | None = None) -> DocumentStore:
    """
    Factory function to get the appropriate document store.

    Args:
        config: Search configuration (loaded from env if not provided)

    Returns:
        PgVectorDocumentStore when config.use_postgres, else InMemoryDocumentStore
    """
    from thesis_search.config import get_config

    config = config or get_config()

    if config.use_postgres:
        from thesis_search.retrieval.pgvector_store import (
            PgVectorDocumentStore,
            PgVectorStoreConfig,
        )

        logger.info(f"Using PostgreSQL document store (table={config.document_table})")
        return PgVectorDocumentStore(PgVectorStoreConfig.from_search_config(config))

    logger.info("Using in-memory document store")
    return InMemoryDocumentStore(embedding_dim=config.embedding_dim)
