"""
Document model for the thesis repository.

This is the internal representation shared by every DocumentStore.
Callers outside the store get projections without the raw vector
(ScoredDocument, or Document.without_vector()).
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

import numpy as np

from thesis_search.core.errors import DocumentValidationError

MAX_TITLE_LENGTH = 500
MAX_ABSTRACT_LENGTH = 5000
MIN_TAGS = 3
MAX_TAGS = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_tags(tags: list[str]) -> list[str]:
    """Lower-case, strip and de-duplicate tags, keeping first-seen order."""
    seen: list[str] = []
    for tag in tags:
        cleaned = tag.strip().lower()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


@dataclass
class Document:
    """
    A thesis with its embedding.

    The vector is replaced wholesale by re-embedding, never patched.
    """

    id: str
    title: str
    abstract: str
    tags: list[str]
    vector: np.ndarray | None = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def create(
        cls,
        title: str,
        abstract: str,
        tags: list[str],
        vector: np.ndarray | None = None,
    ) -> Document:
        """Build a new document with a fresh id and server-side timestamps."""
        now = _utcnow()
        return cls(
            id=uuid.uuid4().hex,
            title=title.strip(),
            abstract=abstract.strip(),
            tags=normalize_tags(tags),
            vector=vector,
            created_at=now,
            updated_at=now,
        )

    @property
    def embedding_dimensions(self) -> int:
        return 0 if self.vector is None else int(len(self.vector))

    def validate(self, embedding_dim: int | None = None) -> None:
        """Raise DocumentValidationError if the document cannot be persisted."""
        if not self.title or len(self.title) > MAX_TITLE_LENGTH:
            raise DocumentValidationError(
                f"Title must be 1-{MAX_TITLE_LENGTH} characters"
            )
        if not self.abstract or len(self.abstract) > MAX_ABSTRACT_LENGTH:
            raise DocumentValidationError(
                f"Abstract must be 1-{MAX_ABSTRACT_LENGTH} characters"
            )
        if not MIN_TAGS <= len(self.tags) <= MAX_TAGS:
            raise DocumentValidationError(
                f"Must have between {MIN_TAGS} and {MAX_TAGS} tags, got {len(self.tags)}"
            )
        if self.vector is None or len(self.vector) == 0:
            raise DocumentValidationError("Vector must be a non-empty array")
        if embedding_dim is not None and len(self.vector) != embedding_dim:
            raise DocumentValidationError(
                f"Vector must have {embedding_dim} dimensions, got {len(self.vector)}"
            )

    def without_vector(self) -> Document:
        return replace(self, vector=None, tags=list(self.tags))

    def with_vector(self, vector: np.ndarray) -> Document:
        """Copy with a replaced vector and a bumped updated_at."""
        return replace(self, vector=vector, tags=list(self.tags), updated_at=_utcnow())

    def to_dict(self) -> dict:
        """Serializable view; reports the vector size, never the vector."""
        return {
            "id": self.id,
            "title": self.title,
            "abstract": self.abstract,
            "tags": self.tags,
            "embedding_dimensions": self.embedding_dimensions,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
