"""
PostgreSQL document store using pgvector.

WHY PGVECTOR:
- HYBRID QUERIES: vector similarity and tag filters in the same SQL
- HNSW INDEX: fast approximate nearest neighbor search
- FALLBACK FRIENDLY: when the index is missing we report IndexUnavailable
  and RetrievalEngine scans all rows instead

Vectors are stored normalized, so the index uses inner product
(vector_ip_ops) and scores match the manual dot-product path exactly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, Sequence

import numpy as np
import psycopg
from pgvector.psycopg import register_vector

from thesis_search.core.errors import IndexUnavailable, RetrievalFailure
from thesis_search.core.protocols import IndexedHit
from thesis_search.retrieval.document import Document
from thesis_search.retrieval.store import order_tags_by_frequency

if TYPE_CHECKING:
    from thesis_search.config import SearchConfig

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, abstract, tags, created_at, updated_at"


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class PgVectorStoreConfig:
    """Configuration for the pgvector store."""

    connection_string: str = "postgresql://localhost/thesis_repository"
    embedding_dim: int = 384
    table_name: str = "theses"
    connect_timeout_s: int = 10
    statement_timeout_ms: int = 30000

    @property
    def index_name(self) -> str:
        return f"{self.table_name}_embedding_idx"

    @classmethod
    def from_search_config(cls, config: SearchConfig) -> PgVectorStoreConfig:
        return cls(
            connection_string=config.database_url,
            embedding_dim=config.embedding_dim,
            table_name=config.document_table,
            connect_timeout_s=max(1, int(config.request_timeout_s)),
            statement_timeout_ms=int(config.request_timeout_s * 1000),
        )


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ---------------------------------------------------------------------------
# PGVECTOR STORE (Production)
# ---------------------------------------------------------------------------


class PgVectorDocumentStore:
    """
    PostgreSQL document store using pgvector.

    The connection is opened lazily on first use. Every read wraps psycopg
    errors: on the indexed path as IndexUnavailable (recoverable), elsewhere
    as RetrievalFailure.
    """

    def __init__(self, config: PgVectorStoreConfig):
        self.config = config
        self._conn = None

    def connect(self) -> None:
        """Establish database connection."""
        try:
            self._conn = psycopg.connect(
                self.config.connection_string,
                autocommit=True,
                connect_timeout=self.config.connect_timeout_s,
                options=f"-c statement_timeout={self.config.statement_timeout_ms}",
            )
            self._conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
            register_vector(self._conn)
        except psycopg.Error as e:
            raise RetrievalFailure(f"Cannot connect to document store: {e}") from e

    def close(self) -> None:
        """Close database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def _connection(self):
        if not self._conn:
            self.connect()
        return self._conn

    def create_schema(self) -> None:
        """Create the theses table and its indexes."""
        conn = self._connection()
        table = self.config.table_name

        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id TEXT PRIMARY KEY,
                title VARCHAR(500) NOT NULL,
                abstract VARCHAR(5000) NOT NULL,
                tags TEXT[] NOT NULL,
                embedding vector({self.config.embedding_dim}) NOT NULL,
                created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
            )
        """
        )

        # HNSW over inner product; vectors are stored normalized
        conn.execute(
            f"""
            CREATE INDEX IF NOT EXISTS {self.config.index_name}
            ON {table}
            USING hnsw (embedding vector_ip_ops)
            WITH (m = 16, ef_construction = 64)
        """
        )
        conn.execute(f"CREATE INDEX IF NOT EXISTS {table}_tags_idx ON {table} USING GIN (tags)")
        conn.execute(
            f"CREATE INDEX IF NOT EXISTS {table}_created_idx ON {table} (created_at DESC)"
        )

    # -- writes -------------------------------------------------------------

    def upsert_document(self, doc: Document) -> None:
        self._connection().execute(
            f"""
            INSERT INTO {self.config.table_name}
                (id, title, abstract, tags, embedding, created_at, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s)
            ON CONFLICT (id) DO UPDATE SET
                title = EXCLUDED.title,
                abstract = EXCLUDED.abstract,
                tags = EXCLUDED.tags,
                embedding = EXCLUDED.embedding,
                updated_at = EXCLUDED.updated_at
            """,
            (
                doc.id,
                doc.title,
                doc.abstract,
                doc.tags,
                np.asarray(doc.vector, dtype=np.float32),
                doc.created_at,
                doc.updated_at,
            ),
        )

    def upsert_documents(self, docs: Sequence[Document]) -> None:
        for doc in docs:
            self.upsert_document(doc)

    def delete_document(self, document_id: str) -> bool:
        cur = self._connection().execute(
            f"DELETE FROM {self.config.table_name} WHERE id = %s", (document_id,)
        )
        return cur.rowcount > 0

    # -- reads --------------------------------------------------------------

    def _index_exists(self, conn) -> bool:
        row = conn.execute(
            "SELECT 1 FROM pg_indexes WHERE tablename = %s AND indexname = %s",
            (self.config.table_name, self.config.index_name),
        ).fetchone()
        return row is not None

    def indexed_vector_search(
        self,
        query_vector: np.ndarray,
        candidate_pool_size: int,
        limit: int,
    ) -> list[IndexedHit]:
        """HNSW search ordered by inner product; score is the inner product."""
        try:
            conn = self._connection()
            if not self._index_exists(conn):
                raise IndexUnavailable(f"Vector index {self.config.index_name} is missing")

            query = np.asarray(query_vector, dtype=np.float32)
            with conn.transaction():
                # ef_search is the HNSW candidate list size
                conn.execute(
                    "SELECT set_config('hnsw.ef_search', %s, true)",
                    (str(candidate_pool_size),),
                )
                rows = conn.execute(
                    f"""
                    SELECT {_COLUMNS}, (embedding <#> %s) * -1 AS score
                    FROM {self.config.table_name}
                    ORDER BY embedding <#> %s
                    LIMIT %s
                    """,
                    (query, query, limit),
                ).fetchall()
        except (psycopg.Error, RetrievalFailure) as e:
            raise IndexUnavailable(f"Indexed vector search failed: {e}") from e

        return [IndexedHit(document=self._row_to_document(row), index_score=float(row[6])) for row in rows]

    def all_documents(self) -> list[Document]:
        rows = self._read(
            f"SELECT {_COLUMNS}, embedding FROM {self.config.table_name} ORDER BY created_at, id"
        )
        return [self._row_to_document(row, vector=np.asarray(row[6])) for row in rows]

    def find_by_id(self, document_id: str) -> Document | None:
        rows = self._read(
            f"SELECT {_COLUMNS}, embedding FROM {self.config.table_name} WHERE id = %s",
            (document_id,),
        )
        if not rows:
            return None
        return self._row_to_document(rows[0], vector=np.asarray(rows[0][6]))

    def find_by_tag_filter(self, tag: str, skip: int, limit: int) -> list[Document]:
        pattern = f"%{_escape_like(tag.strip())}%"
        rows = self._read(
            f"""
            SELECT {_COLUMNS}
            FROM {self.config.table_name}
            WHERE EXISTS (SELECT 1 FROM unnest(tags) AS t WHERE t ILIKE %s)
            ORDER BY created_at DESC
            OFFSET %s LIMIT %s
            """,
            (pattern, skip, limit),
        )
        return [self._row_to_document(row) for row in rows]

    def distinct_tags(self) -> list[str]:
        rows = self._read(f"SELECT tags FROM {self.config.table_name}")
        return order_tags_by_frequency([row[0] or [] for row in rows])

    def _read(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            return self._connection().execute(sql, params).fetchall()
        except psycopg.Error as e:
            logger.error(f"Document store query failed: {e}")
            raise RetrievalFailure(f"Document store query failed: {e}") from e

    @staticmethod
    def _row_to_document(row: Sequence[Any], vector: np.ndarray | None = None) -> Document:
        created_at: datetime = row[4]
        updated_at: datetime = row[5]
        return Document(
            id=row[0],
            title=row[1],
            abstract=row[2],
            tags=list(row[3] or []),
            vector=vector,
            created_at=created_at,
            updated_at=updated_at,
        )
