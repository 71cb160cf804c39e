"""
Core protocols defining the collaborator contracts of the search core.

Every external dependency (embedding service, text generation service,
document store) is described here as a Protocol. RetrievalEngine and
RAGOrchestrator only ever see these contracts, so production backends and
test doubles are interchangeable.

PATTERN:
- Protocol defines the contract
- Production implementation (OpenAIEmbeddings, ChatOpenAIGenerator, PgVectorDocumentStore)
- Test double (MockEmbeddings, MockTextGenerator, InMemoryDocumentStore)
- Factory function chooses between them from configuration
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal, Protocol, Sequence, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from thesis_search.retrieval.document import Document


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OpenAIEmbeddings (OpenAI or any OpenAI-compatible endpoint, e.g. Ollama)
    - MockEmbeddings (testing)
    """

    @property
    def dimensions(self) -> int:
        """Dimensionality of every vector this provider returns."""
        ...

    @property
    def supports_native_embeddings(self) -> bool:
        """False for stand-ins whose vectors carry no semantic meaning."""
        ...

    def embed(self, text: str) -> np.ndarray:
        """Generate a unit-length embedding for a single text."""
        ...

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate unit-length embeddings for multiple texts."""
        ...

    def check_health(self) -> bool:
        """True when the embedding backend answers. Never raises."""
        ...


# ---------------------------------------------------------------------------
# TEXT GENERATION PROTOCOL
# ---------------------------------------------------------------------------


@runtime_checkable
class TextGenerator(Protocol):
    """
    Contract for text generation.

    Implementations:
    - ChatOpenAIGenerator (OpenAI, Groq or Ollama chat endpoints)
    - MockTextGenerator (testing)
    """

    def generate(
        self,
        prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> str:
        """Complete a prompt and return the generated text."""
        ...

    def check_health(self) -> bool:
        """True when the generation backend answers. Never raises."""
        ...


# ---------------------------------------------------------------------------
# DOCUMENT STORE PROTOCOL
# ---------------------------------------------------------------------------


@dataclass
class IndexedHit:
    """A candidate returned by an indexed nearest-neighbor search."""

    document: Document
    index_score: float


@runtime_checkable
class DocumentStore(Protocol):
    """
    Contract for the persisted thesis collection.

    Implementations:
    - PgVectorDocumentStore (PostgreSQL with pgvector)
    - InMemoryDocumentStore (testing/development)
    """

    def connect(self) -> None:
        ...

    def close(self) -> None:
        ...

    def indexed_vector_search(
        self,
        query_vector: np.ndarray,
        candidate_pool_size: int,
        limit: int,
    ) -> list[IndexedHit]:
        """Top-K search through a vector index. May raise IndexUnavailable."""
        ...

    def all_documents(self) -> list[Document]:
        """Full scan in storage order."""
        ...

    def find_by_id(self, document_id: str) -> Document | None:
        ...

    def find_by_tag_filter(self, tag: str, skip: int, limit: int) -> list[Document]:
        """Case-insensitive tag match, newest first, paginated."""
        ...

    def distinct_tags(self) -> list[str]:
        """Every tag once, most frequent first."""
        ...

    def upsert_document(self, doc: Document) -> None:
        ...

    def upsert_documents(self, docs: Sequence[Document]) -> None:
        ...

    def delete_document(self, document_id: str) -> bool:
        ...


# ---------------------------------------------------------------------------
# RESULT TYPES
# ---------------------------------------------------------------------------


@dataclass
class ScoredDocument:
    """A document projection (no raw vector) paired with a relevance score."""

    id: str
    title: str
    abstract: str
    tags: list[str]
    score: float
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, doc: Document, score: float) -> ScoredDocument:
        return cls(
            id=doc.id,
            title=doc.title,
            abstract=doc.abstract,
            tags=list(doc.tags),
            score=float(score),
            created_at=doc.created_at,
            updated_at=doc.updated_at,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "abstract": self.abstract,
            "tags": self.tags,
            "score": self.score,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class ConversationTurn:
    """One message of a conversation. Immutable."""

    role: Role
    content: str

    def __post_init__(self) -> None:
        if self.role not in ("user", "assistant"):
            raise ValueError(f"Unknown conversation role: {self.role!r}")

    @classmethod
    def from_dict(cls, data: dict) -> ConversationTurn:
        return cls(role=data["role"], content=data["content"])

    def to_dict(self) -> dict:
        return {"role": self.role, "content": self.content}


ConversationHistory = tuple[ConversationTurn, ...]


def append_turns(
    history: Sequence[ConversationTurn],
    *turns: ConversationTurn,
) -> ConversationHistory:
    """Return a new history with turns appended; the input is left untouched."""
    return tuple(history) + turns


@dataclass
class ChatSource:
    """A retrieved document cited by a chat answer."""

    id: str
    title: str
    tags: list[str]
    relevance_score: float

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "tags": self.tags,
            "relevance_score": self.relevance_score,
        }


@dataclass
class ChatResult:
    """Outcome of one chat turn."""

    answer: str
    sources: list[ChatSource]
    updated_history: ConversationHistory
    search_query: str = ""
    retrieval_latency_ms: float = 0.0
    generation_latency_ms: float = 0.0
    total_latency_ms: float = 0.0
    metadata: dict = field(default_factory=dict)

    @property
    def grounded(self) -> bool:
        """True when the answer was generated from retrieved documents."""
        return bool(self.sources)

    def to_dict(self) -> dict:
        return {
            "answer": self.answer,
            "sources": [s.to_dict() for s in self.sources],
            "conversation_history": [t.to_dict() for t in self.updated_history],
        }
