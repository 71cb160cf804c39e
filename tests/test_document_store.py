"""
Unit Tests for the Document model and InMemoryDocumentStore

Tests the store through the DocumentStore protocol surface the engine uses.
"""

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from thesis_search.config import SearchConfig
from thesis_search.core import DocumentStore
from thesis_search.core.errors import DimensionMismatch, DocumentValidationError, IndexUnavailable
from thesis_search.retrieval.document import Document, normalize_tags
from thesis_search.retrieval.store import (
    InMemoryDocumentStore,
    get_document_store,
    order_tags_by_frequency,
)

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_doc(doc_id, vector, tags=("ml", "nlp", "ai"), days=0):
    return Document(
        id=doc_id,
        title=f"Title {doc_id}",
        abstract=f"Abstract {doc_id}",
        tags=list(tags),
        vector=np.array(vector, dtype=np.float32),
        created_at=BASE_TIME + timedelta(days=days),
        updated_at=BASE_TIME + timedelta(days=days),
    )


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def store():
    store = InMemoryDocumentStore()
    store.upsert_documents([
        make_doc("a", [1.0, 0.0], tags=["Machine Learning", "nlp", "ai"], days=0),
        make_doc("b", [0.0, 1.0], tags=["blockchain", "iot", "security"], days=2),
        make_doc("c", [0.6, 0.8], tags=["deep learning", "nlp", "vision"], days=1),
    ])
    return store


# ---------------------------------------------------------------------------
# DOCUMENT MODEL
# ---------------------------------------------------------------------------


class TestDocument:
    def test_create_assigns_id_and_timestamps(self):
        doc = Document.create("  A Title ", "An abstract", ["NLP", "nlp ", "AI", "ML"])

        assert len(doc.id) == 32
        assert doc.title == "A Title"
        assert doc.tags == ["nlp", "ai", "ml"]
        assert doc.created_at == doc.updated_at
        assert doc.created_at.tzinfo is not None

    def test_validate_accepts_valid_document(self):
        make_doc("a", [1.0, 0.0]).validate(embedding_dim=2)

    @pytest.mark.parametrize(
        "changes",
        [
            {"title": ""},
            {"title": "x" * 501},
            {"abstract": "x" * 5001},
            {"tags": ["one", "two"]},
            {"tags": ["a", "b", "c", "d", "e", "f"]},
            {"vector": None},
            {"vector": np.array([], dtype=np.float32)},
        ],
    )
    def test_validate_rejects(self, changes):
        doc = make_doc("a", [1.0, 0.0])
        for key, value in changes.items():
            setattr(doc, key, value)

        with pytest.raises(DocumentValidationError):
            doc.validate()

    def test_validate_rejects_wrong_dimension(self):
        with pytest.raises(DocumentValidationError, match="3 dimensions"):
            make_doc("a", [1.0, 0.0]).validate(embedding_dim=3)

    def test_without_vector(self):
        doc = make_doc("a", [1.0, 0.0])
        projection = doc.without_vector()

        assert projection.vector is None
        assert doc.vector is not None
        assert projection.embedding_dimensions == 0

    def test_with_vector_bumps_updated_at(self):
        doc = make_doc("a", [1.0, 0.0])
        updated = doc.with_vector(np.array([0.0, 1.0], dtype=np.float32))

        assert updated.vector.tolist() == [0.0, 1.0]
        assert updated.created_at == doc.created_at
        assert updated.updated_at > doc.updated_at

    def test_to_dict_reports_dimensions_not_vector(self):
        data = make_doc("a", [1.0, 0.0]).to_dict()

        assert data["embedding_dimensions"] == 2
        assert "vector" not in data

    def test_normalize_tags(self):
        assert normalize_tags([" NLP", "nlp", "", "Deep Learning"]) == ["nlp", "deep learning"]


# ---------------------------------------------------------------------------
# IN-MEMORY STORE
# ---------------------------------------------------------------------------


class TestInMemoryDocumentStore:
    def test_satisfies_protocol(self, store):
        assert isinstance(store, DocumentStore)

    def test_all_documents_in_insertion_order(self, store):
        assert [d.id for d in store.all_documents()] == ["a", "b", "c"]

    def test_upsert_replaces_in_place(self, store):
        store.upsert_document(make_doc("a", [0.0, 1.0]))

        assert len(store) == 3
        assert [d.id for d in store.all_documents()] == ["a", "b", "c"]
        assert store.find_by_id("a").vector.tolist() == [0.0, 1.0]

    def test_find_by_id_missing(self, store):
        assert store.find_by_id("missing") is None

    def test_delete_document(self, store):
        assert store.delete_document("a") is True
        assert store.delete_document("a") is False
        assert len(store) == 2

    def test_indexed_search_orders_by_score(self, store):
        hits = store.indexed_vector_search(np.array([1.0, 0.0]), candidate_pool_size=10, limit=2)

        assert [h.document.id for h in hits] == ["a", "c"]
        assert hits[0].index_score == pytest.approx(1.0)
        assert hits[1].index_score == pytest.approx(0.6)

    def test_indexed_search_disabled_raises(self):
        store = InMemoryDocumentStore(index_enabled=False)
        with pytest.raises(IndexUnavailable):
            store.indexed_vector_search(np.array([1.0, 0.0]), candidate_pool_size=10, limit=2)

    def test_fixed_dimension_rejects_wrong_length_vector(self):
        store = InMemoryDocumentStore(embedding_dim=4)

        with pytest.raises(DimensionMismatch):
            store.upsert_document(make_doc("short", [1.0, 0.0, 0.0]))
        assert len(store) == 0

    def test_fixed_dimension_accepts_document_without_vector(self):
        store = InMemoryDocumentStore(embedding_dim=4)
        store.upsert_document(Document(id="bare", title="T", abstract="A", tags=["a", "b", "c"]))
        assert store.find_by_id("bare") is not None

    def test_indexed_search_mixed_dimensions_raises(self):
        store = InMemoryDocumentStore()
        store.upsert_documents([make_doc("four", [1.0, 0.0, 0.0, 0.0]), make_doc("three", [1.0, 0.0, 0.0])])

        with pytest.raises(DimensionMismatch):
            store.indexed_vector_search(np.array([1.0, 0.0, 0.0, 0.0]), candidate_pool_size=10, limit=2)

    def test_indexed_search_empty_store(self):
        store = InMemoryDocumentStore()
        assert store.indexed_vector_search(np.array([1.0, 0.0]), 10, 5) == []

    def test_tag_filter_is_case_insensitive_substring(self, store):
        docs = store.find_by_tag_filter("LEARN", skip=0, limit=10)

        # Newest first: c (day 1) before a (day 0)
        assert [d.id for d in docs] == ["c", "a"]
        assert all(d.vector is None for d in docs)

    def test_tag_filter_pagination(self, store):
        assert [d.id for d in store.find_by_tag_filter("nlp", skip=1, limit=1)] == ["a"]
        assert store.find_by_tag_filter("nlp", skip=5, limit=1) == []

    def test_distinct_tags_by_frequency(self, store):
        tags = store.distinct_tags()

        assert tags[0] == "nlp"
        assert len(tags) == len(set(tags)) == 8


class TestOrderTagsByFrequency:
    def test_ties_are_alphabetical(self):
        assert order_tags_by_frequency([["b", "a"], ["c", "a"]]) == ["a", "b", "c"]

    def test_empty(self):
        assert order_tags_by_frequency([]) == []


class TestGetDocumentStore:
    def test_defaults_to_memory(self):
        store = get_document_store(SearchConfig(use_postgres=False))
        assert isinstance(store, InMemoryDocumentStore)

    def test_memory_store_enforces_configured_dimension(self):
        store = get_document_store(SearchConfig(use_postgres=False, embedding_dim=3))
        assert store.embedding_dim == 3

    def test_postgres_when_enabled(self):
        from thesis_search.retrieval.pgvector_store import PgVectorDocumentStore

        config = SearchConfig(use_postgres=True, database_url="postgresql://x/y", embedding_dim=3)
        store = get_document_store(config)

        assert isinstance(store, PgVectorDocumentStore)
        assert store.config.embedding_dim == 3
        assert store.config.connection_string == "postgresql://x/y"
