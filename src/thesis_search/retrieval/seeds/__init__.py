"""
Seed data and bulk embedding passes for the document store.
"""

from thesis_search.retrieval.seeds.sample_theses import (
    get_sample_theses,
    seed_document_store,
    reembed_documents,
)

__all__ = ["get_sample_theses", "seed_document_store", "reembed_documents"]
