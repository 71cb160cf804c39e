"""
Sample thesis corpus and ingestion helpers.

Seed documents carry their tags already; tag generation happens outside
this package. Embedding runs as one batched call per seeding or
re-embedding pass.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from thesis_search.embeddings.openai_embeddings import document_text
from thesis_search.retrieval.document import Document

if TYPE_CHECKING:
    from thesis_search.core import DocumentStore, EmbeddingProvider

logger = logging.getLogger(__name__)

_SAMPLE_THESES = [
    (
        "thesis_nlp_transformers",
        "Deep Learning for Natural Language Processing in Low-Resource Languages",
        "This thesis investigates transfer learning with transformer models for "
        "languages with little annotated data. We pre-train multilingual encoders, "
        "fine-tune them on named entity recognition and sentiment analysis, and show "
        "that cross-lingual transfer closes most of the gap to high-resource baselines.",
        ["deep learning", "nlp", "transformers", "transfer learning"],
    ),
    (
        "thesis_blockchain_supply",
        "Blockchain-Based Traceability for Agricultural Supply Chains",
        "We design a permissioned blockchain that records every hand-off of produce "
        "from farm to retailer. Smart contracts enforce certification rules, and a "
        "field study with three cooperatives measures the cost and latency of "
        "on-chain traceability compared with paper records.",
        ["blockchain", "supply chain", "smart contracts", "agriculture"],
    ),
    (
        "thesis_medical_imaging",
        "Convolutional Neural Networks for Early Tumor Detection in MRI Scans",
        "This work trains convolutional neural networks to segment brain tumors in "
        "magnetic resonance images. Data augmentation and attention modules improve "
        "sensitivity on small lesions, and a reader study compares the model with "
        "radiologists on a held-out hospital dataset.",
        ["machine learning", "medical imaging", "healthcare", "computer vision"],
    ),
    (
        "thesis_renewable_grid",
        "Forecasting Solar Power Output for Smart Grid Balancing",
        "We compare statistical and machine learning models for day-ahead solar "
        "generation forecasts and feed them into a grid balancing simulator. Gradient "
        "boosted trees with weather features reduce balancing costs by twelve percent.",
        ["renewable energy", "smart grid", "forecasting", "machine learning"],
    ),
    (
        "thesis_iot_security",
        "Lightweight Intrusion Detection for IoT Networks",
        "Resource-constrained Internet of Things devices cannot run conventional "
        "intrusion detection. This thesis proposes a federated anomaly detector that "
        "runs on gateways, evaluates it on public attack datasets, and analyses its "
        "energy footprint.",
        ["cybersecurity", "iot", "intrusion detection", "federated learning"],
    ),
    (
        "thesis_chatbot_education",
        "Conversational Agents as Tutors in Introductory Programming Courses",
        "We deployed a retrieval-augmented chatbot in a first-year programming course "
        "and studied how students used it. Logs and surveys show higher completion of "
        "exercises, while answer grounding in course material limited hallucinations.",
        ["education", "chatbots", "nlp", "large language models"],
    ),
]


def get_sample_theses() -> list[Document]:
    """Seed documents without vectors."""
    return [
        Document(id=doc_id, title=title, abstract=abstract, tags=list(tags))
        for doc_id, title, abstract, tags in _SAMPLE_THESES
    ]


def seed_document_store(
    store: DocumentStore,
    embeddings: EmbeddingProvider,
    documents: Sequence[Document] | None = None,
) -> int:
    """
    Embed and upsert documents (the sample corpus by default).

    Returns:
        Number of documents written
    """
    docs = list(documents) if documents is not None else get_sample_theses()
    if not docs:
        return 0

    logger.info(f"Generating embeddings for {len(docs)} documents...")
    vectors = embeddings.embed_batch([document_text(d.title, d.abstract) for d in docs])

    embedded = [doc.with_vector(vector) for doc, vector in zip(docs, vectors)]
    for doc in embedded:
        doc.validate(embedding_dim=embeddings.dimensions)

    store.upsert_documents(embedded)
    logger.info(f"Seeded {len(embedded)} documents")
    return len(embedded)


def reembed_documents(
    store: DocumentStore,
    embeddings: EmbeddingProvider,
    embedding_dim: int,
) -> tuple[int, int]:
    """
    Replace every stored vector with a fresh embedding.

    Used after switching embedding models. Documents whose new vector has
    the wrong dimensionality are left untouched and counted as failed.

    Returns:
        (succeeded, failed)
    """
    docs = store.all_documents()
    logger.info(f"Found {len(docs)} theses to re-embed")
    if not docs:
        return 0, 0

    vectors = embeddings.embed_batch([document_text(d.title, d.abstract) for d in docs])

    succeeded = failed = 0
    for doc, vector in zip(docs, vectors):
        if len(vector) != embedding_dim:
            logger.error(
                f"Skipping {doc.id}: expected {embedding_dim} dimensions, got {len(vector)}"
            )
            failed += 1
            continue
        store.upsert_document(doc.with_vector(vector))
        succeeded += 1

    logger.info(f"Re-embedding complete: {succeeded} succeeded, {failed} failed")
    return succeeded, failed
