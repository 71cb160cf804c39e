"""
RAG orchestrator - the public API for chat over the thesis repository.

One chat turn runs the compiled graph:
rewrite -> retrieve -> (no results | build context -> generate -> respond)

FAILURE SEMANTICS:
------------------
- Rewrite never fails (falls back to the original message)
- No relevant theses is a normal outcome with a canned answer
- Retrieval or generation failures end the turn as ChatProcessingFailed
- EmbeddingServiceError from the query embedding propagates unchanged

The orchestrator holds no per-conversation state. Callers pass the history
in and get a new, longer history back.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Sequence

from thesis_search.chat.graph import build_chat_graph
from thesis_search.chat.prompts import (
    GENERIC_SUGGESTIONS,
    SUMMARY_TEMPLATE,
    TAG_SUGGESTION_TEMPLATES,
)
from thesis_search.chat.query_rewriter import QueryRewriter
from thesis_search.chat.state import create_initial_state
from thesis_search.core.errors import DocumentNotFound
from thesis_search.core.protocols import ChatResult, ConversationTurn
from thesis_search.observability import (
    CHAT_HISTORY_LENGTH,
    CHAT_OUTCOME,
    CHAT_QUERY,
    CHAT_QUERY_REWRITTEN,
    CHAT_SOURCE_COUNT,
    get_tracer,
    get_tracing_config,
)

if TYPE_CHECKING:
    from thesis_search.config import SearchConfig
    from thesis_search.core import DocumentStore, EmbeddingProvider, TextGenerator
    from thesis_search.retrieval.engine import RetrievalEngine

logger = logging.getLogger(__name__)

SUGGESTION_COUNT = 4


class RAGOrchestrator:
    """
    Retrieval-augmented chat, suggested questions and thesis summaries.

    Dependencies are INJECTED:
        engine: RetrievalEngine over the document store
        embeddings: EmbeddingProvider for chat queries
        generator: TextGenerator for rewriting, answers and summaries
        config: SearchConfig
        rewriter: QueryRewriter; built from generator when rewriting is enabled
    """

    def __init__(
        self,
        engine: RetrievalEngine,
        embeddings: EmbeddingProvider,
        generator: TextGenerator,
        config: SearchConfig,
        rewriter: QueryRewriter | None = None,
    ):
        self.engine = engine
        self.config = config
        self._generator = generator
        if rewriter is None and config.rewrite_enabled:
            rewriter = QueryRewriter(generator, config)
        self._graph = build_chat_graph(engine, embeddings, generator, config, rewriter)

    @property
    def store(self) -> DocumentStore:
        return self.engine.store

    # ------------------------------------------------------------------
    # CHAT
    # ------------------------------------------------------------------

    def process_chat_message(
        self,
        message: str,
        history: Sequence[ConversationTurn] = (),
        top_k: int | None = None,
    ) -> ChatResult:
        """
        Answer one chat message from retrieved theses.

        Args:
            message: the user's message, answered in its original wording
            history: prior turns; never modified
            top_k: number of theses to ground on (config.rag_top_k if None)

        Returns:
            ChatResult with answer, sources and the extended history

        Raises:
            ValueError: blank message
            EmbeddingServiceError: the search query could not be embedded
            ChatProcessingFailed: retrieval or generation failed
        """
        if not message or not message.strip():
            raise ValueError("Message must not be empty")

        start = time.time()
        history = tuple(history)
        top_k = self.config.rag_top_k if top_k is None else top_k
        logger.info(f'Processing chat message: "{message}"')

        attributes = {CHAT_HISTORY_LENGTH: len(history)}
        if get_tracing_config().capture_query_text:
            attributes[CHAT_QUERY] = message

        with get_tracer().start_span("chat.process_message", attributes=attributes) as span:
            initial = create_initial_state(
                message, history, top_k=top_k, threshold=self.config.rag_threshold
            )
            try:
                final = self._graph.invoke(initial)
            except Exception as e:
                span.fail(e)
                raise

            span.set_attribute(CHAT_QUERY_REWRITTEN, final["search_query"] != message)
            span.set_attribute(CHAT_SOURCE_COUNT, len(final["sources"]))
            span.set_attribute(CHAT_OUTCOME, "answered" if final["sources"] else "no_results")

        if final["sources"]:
            logger.info("Chat response generated successfully")
        else:
            logger.info("No relevant theses found; returned canned answer")

        return ChatResult(
            answer=final["answer"],
            sources=final["sources"],
            updated_history=final["updated_history"],
            search_query=final["search_query"],
            retrieval_latency_ms=final["retrieval_latency_ms"],
            generation_latency_ms=final["generation_latency_ms"],
            total_latency_ms=(time.time() - start) * 1000,
        )

    # ------------------------------------------------------------------
    # AUXILIARY OPERATIONS
    # ------------------------------------------------------------------

    def get_suggested_questions(self) -> list[str]:
        """
        Starter questions built from the most common tags.

        Never raises: an empty or unreachable store yields generic prompts.
        """
        try:
            tags = self.store.distinct_tags()
        except Exception as e:
            logger.warning(f"Could not load tags for suggestions: {e}")
            return list(GENERIC_SUGGESTIONS)

        if not tags:
            return list(GENERIC_SUGGESTIONS)

        suggestions = []
        tag_index = 0
        for template in TAG_SUGGESTION_TEMPLATES:
            if "{tag}" in template:
                suggestions.append(template.format(tag=tags[tag_index % len(tags)]))
                tag_index += 1
            else:
                suggestions.append(template)
        return suggestions[:SUGGESTION_COUNT]

    def summarize_document(self, document_id: str) -> str:
        """
        Short AI summary of one thesis.

        Raises:
            DocumentNotFound: document_id does not exist
            GenerationServiceError: the model call failed
        """
        doc = self.store.find_by_id(document_id)
        if doc is None:
            raise DocumentNotFound(document_id)

        prompt = SUMMARY_TEMPLATE.format(title=doc.title, abstract=doc.abstract)
        summary = self._generator.generate(
            prompt,
            temperature=self.config.summary_temperature,
            max_tokens=self.config.summary_max_tokens,
        )
        return summary.strip()


def build_rag_orchestrator(
    config: SearchConfig | None = None,
    store: DocumentStore | None = None,
    embeddings: EmbeddingProvider | None = None,
    generator: TextGenerator | None = None,
) -> RAGOrchestrator:
    """
    Wire an orchestrator from configuration.

    Any collaborator passed explicitly is used as-is; the rest come from
    the factories.
    """
    from thesis_search.config import get_config
    from thesis_search.embeddings import get_embedding_provider
    from thesis_search.generation import get_text_generator
    from thesis_search.retrieval import RetrievalEngine, get_document_store

    config = config or get_config()
    store = store or get_document_store(config)
    embeddings = embeddings or get_embedding_provider(config)
    generator = generator or get_text_generator(config)

    engine = RetrievalEngine(store, config, embeddings=embeddings)
    return RAGOrchestrator(engine, embeddings, generator, config)
