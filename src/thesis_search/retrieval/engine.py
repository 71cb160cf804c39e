"""
Retrieval engine - ranks theses by relevance to a query vector.

SEARCH PATHS:
-------------
1. Indexed: ask the store's vector index for the top `limit` hits out of an
   over-fetched candidate pool, then drop hits below the threshold.
2. Manual: scan every document, score with dot_product_matrix, filter by
   threshold, stable-sort descending, truncate.

Path 2 runs whenever path 1 raises IndexUnavailable (or any non-domain
backend error) or comes back empty. Domain errors such as
DimensionMismatch propagate.

Because stored vectors are normalized and both paths score by inner
product, the two paths produce the same ranking for the same data.

The engine is stateless: all state lives in the injected store.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from thesis_search.core.errors import (
    DimensionMismatch,
    DocumentNotFound,
    IndexUnavailable,
    RetrievalFailure,
    ThesisSearchError,
)
from thesis_search.core.protocols import ScoredDocument
from thesis_search.observability import (
    RETRIEVAL_FALLBACK_REASON,
    RETRIEVAL_PATH,
    RETRIEVAL_RESULT_COUNT,
    get_tracer,
    retrieval_attributes,
)
from thesis_search.retrieval.vector_math import dot_product_matrix, stack_vectors

if TYPE_CHECKING:
    from thesis_search.config import SearchConfig
    from thesis_search.core import DocumentStore, EmbeddingProvider
    from thesis_search.retrieval.document import Document

logger = logging.getLogger(__name__)


def rank_documents(
    docs: list[Document],
    query_vector: np.ndarray,
    limit: int,
    threshold: float | None = None,
) -> list[ScoredDocument]:
    """
    Score docs against query_vector and return the best `limit`.

    Ties keep the input order (stable sort). Documents without a vector are
    skipped. A threshold of None disables filtering.
    """
    candidates = [d for d in docs if d.vector is not None]
    if not candidates or limit <= 0:
        return []

    query = np.asarray(query_vector, dtype=np.float64)
    matrix = stack_vectors([d.vector for d in candidates], query.shape[0])
    scores = dot_product_matrix(matrix, query)
    order = np.argsort(-scores, kind="stable")

    ranked = []
    for i in order:
        if threshold is not None and scores[i] < threshold:
            # Sorted descending: nothing after this passes either
            break
        ranked.append(ScoredDocument.from_document(candidates[i], float(scores[i])))
        if len(ranked) == limit:
            break
    return ranked


class RetrievalEngine:
    """
    Semantic search, related-document lookup and tag search.

    Dependencies are INJECTED:
        store: DocumentStore (PgVectorDocumentStore, InMemoryDocumentStore)
        config: SearchConfig with D, default limits and thresholds
        embeddings: optional EmbeddingProvider, only needed by search_text()
    """

    def __init__(
        self,
        store: DocumentStore,
        config: SearchConfig,
        embeddings: EmbeddingProvider | None = None,
    ):
        self.store = store
        self.config = config
        self._embeddings = embeddings

    # ------------------------------------------------------------------
    # SEMANTIC SEARCH
    # ------------------------------------------------------------------

    def search(
        self,
        query_vector: np.ndarray,
        limit: int | None = None,
        threshold: float | None = None,
    ) -> list[ScoredDocument]:
        """
        Rank documents by similarity to query_vector.

        Args:
            query_vector: normalized query embedding of dimension D
            limit: maximum results (config.default_limit if None)
            threshold: minimum score (config.default_threshold if None)

        Returns:
            ScoredDocuments sorted by descending score, at most `limit` long

        Raises:
            DimensionMismatch: query_vector is not D-dimensional
            RetrievalFailure: the store could not be read on either path
        """
        limit = self.config.default_limit if limit is None else limit
        threshold = self.config.default_threshold if threshold is None else threshold

        query = np.asarray(query_vector, dtype=np.float32)
        if query.ndim != 1 or query.shape[0] != self.config.embedding_dim:
            raise DimensionMismatch(expected=self.config.embedding_dim, actual=query.size)

        if limit <= 0:
            return []

        pool = max(limit, limit * self.config.candidate_multiplier)
        tracer = get_tracer()
        with tracer.start_span(
            "retrieval.search", attributes=retrieval_attributes(limit, threshold, pool)
        ) as span:
            try:
                results = self._indexed_search(query, pool, limit, threshold)
                if results:
                    logger.info(f"Found {len(results)} results using indexed vector search")
                    span.set_attribute(RETRIEVAL_PATH, "indexed")
                    span.set_attribute(RETRIEVAL_RESULT_COUNT, len(results))
                    return results
                span.set_attribute(RETRIEVAL_FALLBACK_REASON, "empty")
            except IndexUnavailable as e:
                logger.warning(f"Indexed vector search unavailable, falling back to manual scan: {e}")
                span.set_attribute(RETRIEVAL_FALLBACK_REASON, "unavailable")
            except ThesisSearchError:
                raise
            except Exception as e:
                # Raw backend error from a store that does not map it itself
                logger.warning(f"Indexed vector search failed, falling back to manual scan: {e}")
                span.set_attribute(RETRIEVAL_FALLBACK_REASON, "error")

            results = self._manual_search(query, limit, threshold)
            logger.info(f"Found {len(results)} results using manual scan")
            span.set_attribute(RETRIEVAL_PATH, "manual")
            span.set_attribute(RETRIEVAL_RESULT_COUNT, len(results))
            return results

    def search_text(
        self,
        query: str,
        limit: int | None = None,
        threshold: float | None = None,
    ) -> list[ScoredDocument]:
        """Embed a free-text query and search. EmbeddingServiceError propagates."""
        if self._embeddings is None:
            raise RuntimeError("search_text requires an embedding provider")

        logger.info(f'Performing semantic search for: "{query}"')
        return self.search(self._embeddings.embed(query), limit=limit, threshold=threshold)

    def _indexed_search(
        self,
        query: np.ndarray,
        pool: int,
        limit: int,
        threshold: float,
    ) -> list[ScoredDocument]:
        hits = self.store.indexed_vector_search(query, candidate_pool_size=pool, limit=limit)

        scored = [
            ScoredDocument.from_document(hit.document, hit.index_score)
            for hit in hits
            if hit.index_score >= threshold
        ]
        # Index order is usually already by score; enforce it anyway (stable)
        scored.sort(key=lambda s: s.score, reverse=True)
        return scored[:limit]

    def _manual_search(
        self,
        query: np.ndarray,
        limit: int,
        threshold: float,
    ) -> list[ScoredDocument]:
        docs = self._load_all()
        return rank_documents(docs, query, limit, threshold)

    def _load_all(self) -> list[Document]:
        try:
            return self.store.all_documents()
        except ThesisSearchError:
            raise
        except Exception as e:
            logger.error(f"Error in manual vector search: {e}")
            raise RetrievalFailure(f"Could not scan document store: {e}") from e

    # ------------------------------------------------------------------
    # RELATED DOCUMENTS
    # ------------------------------------------------------------------

    def find_similar(self, document_id: str, limit: int | None = None) -> list[ScoredDocument]:
        """
        Documents closest to the given one, most similar first.

        No threshold: the contract is "most similar of what is available".
        The reference document itself is never returned.

        Raises:
            DocumentNotFound: document_id does not exist
        """
        limit = self.config.similar_limit if limit is None else limit
        logger.info(f"Finding theses similar to: {document_id}")

        with get_tracer().start_span(
            "retrieval.find_similar", attributes=retrieval_attributes(limit, None)
        ) as span:
            reference = self.store.find_by_id(document_id)
            if reference is None:
                raise DocumentNotFound(document_id)
            if reference.vector is None:
                raise RetrievalFailure(f"Document {document_id} has no vector")

            others = [d for d in self._load_all() if d.id != document_id]
            results = rank_documents(others, reference.vector, limit)
            span.set_attribute(RETRIEVAL_PATH, "manual")
            span.set_attribute(RETRIEVAL_RESULT_COUNT, len(results))

        logger.info(f"Found {len(results)} similar theses")
        return results

    # ------------------------------------------------------------------
    # TAG SEARCH
    # ------------------------------------------------------------------

    def search_by_tag(
        self,
        tag: str,
        limit: int | None = None,
        skip: int = 0,
    ) -> list[Document]:
        """Newest documents having a tag that contains `tag` (case-insensitive)."""
        limit = self.config.tag_search_limit if limit is None else limit
        if limit <= 0:
            return []
        if skip < 0:
            raise ValueError("skip must be non-negative")

        logger.info(f'Searching theses by tag: "{tag}"')
        docs = self.store.find_by_tag_filter(tag, skip=skip, limit=limit)
        logger.info(f'Found {len(docs)} theses with tag "{tag}"')
        return [doc.without_vector() for doc in docs]

    def get_all_tags(self) -> list[str]:
        """Every tag in the repository, alphabetical."""
        tags = sorted(self.store.distinct_tags())
        logger.info(f"Retrieved {len(tags)} unique tags")
        return tags
