"""
Error taxonomy for the retrieval and chat core.

Only two failures are ever absorbed inside the core:
- IndexUnavailable: converted into the manual-scan fallback by RetrievalEngine
- any QueryRewriter failure: the original utterance is used instead

Everything else propagates to the caller. The application layer decides
how these map to user-facing messages or status codes.
"""

from __future__ import annotations


class ThesisSearchError(Exception):
    """Base class for every error raised by thesis_search."""


class ConfigurationError(ThesisSearchError):
    """A setting is missing, malformed, or names an unsupported provider."""


class DimensionMismatch(ThesisSearchError, ValueError):
    """Two vectors of different length were compared. Programming error."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}"
        )


class DocumentValidationError(ThesisSearchError, ValueError):
    """A document violates the model constraints (lengths, tags, vector)."""


class EmbeddingServiceError(ThesisSearchError):
    """The upstream embedding service failed or timed out."""


class GenerationServiceError(ThesisSearchError):
    """The upstream text-generation service failed or timed out."""


class IndexUnavailable(ThesisSearchError):
    """The indexed vector search path cannot serve this request."""


class RetrievalFailure(ThesisSearchError):
    """The document store could not be read on any search path."""


class DocumentNotFound(ThesisSearchError, LookupError):
    """A referenced document id does not exist."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}")


NotFound = DocumentNotFound


class ChatProcessingFailed(ThesisSearchError):
    """A chat turn failed after the retrieval stage started."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"Chat processing failed during {stage}: {message}")
