"""Semantic table index over table_semantics embeddings."""

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import psycopg2
from psycopg2 import extras, sql

from agents.executor_agent.pool import ConnectionPool

logger = logging.getLogger(__name__)

EMBEDDING_COLUMN = "embed"

_KIND_ALIASES = {
    "table": "table",
    "material_view": "materialized_view",
    "materialized_view": "materialized_view",
}


@dataclass
class TableDescriptor:
    """Metadata for one queryable table or materialized view."""

    id: str
    name: str
    kind: str = "table"
    description: Optional[str] = None
    columns: List[str] = field(default_factory=list)
    embedding: Optional[List[float]] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "TableDescriptor":
        kind = _KIND_ALIASES.get(str(row.get("type") or "table"), "table")
        return cls(
            id=str(row["id"]),
            name=row["name"],
            kind=kind,
            description=row.get("description"),
            columns=parse_columns(row.get("columns")),
            embedding=parse_embedding(row.get(EMBEDDING_COLUMN), row.get("name")),
        )

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind,
            "description": self.description,
            "columns": self.columns,
            "has_embedding": bool(self.embedding),
            "embedding_dimension": len(self.embedding) if self.embedding else 0,
        }


@dataclass
class MatchResult:
    """A descriptor paired with its similarity to the query vector."""

    descriptor: TableDescriptor
    similarity: float

    @property
    def name(self) -> str:
        return self.descriptor.name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.descriptor.id,
            "name": self.descriptor.name,
            "kind": self.descriptor.kind,
            "description": self.descriptor.description,
            "columns": self.descriptor.columns,
            "similarity": self.similarity,
        }


def cosine_similarity(vector1: Sequence[float], vector2: Sequence[float]) -> float:
    """Cosine similarity; 0.0 for empty, zero-magnitude or mismatched vectors."""
    if not vector1 or not vector2:
        return 0.0

    if len(vector1) != len(vector2):
        logger.warning(f"Vector dimension mismatch: {len(vector1)} vs {len(vector2)}")
        return 0.0

    dot_product = 0.0
    magnitude1 = 0.0
    magnitude2 = 0.0
    for a, b in zip(vector1, vector2):
        dot_product += a * b
        magnitude1 += a * a
        magnitude2 += b * b

    magnitude1 = math.sqrt(magnitude1)
    magnitude2 = math.sqrt(magnitude2)
    if magnitude1 == 0 or magnitude2 == 0:
        return 0.0

    return dot_product / (magnitude1 * magnitude2)


def parse_embedding(raw: Any, table_name: Optional[str] = None) -> Optional[List[float]]:
    """Normalize a stored embedding to a list of floats.

    Accepts JSON / pgvector text (``"[0.1,0.2]"``) or a numeric sequence.
    Returns None for anything else, including empty vectors.
    """
    if raw is None:
        return None

    if isinstance(raw, (bytes, bytearray, memoryview)):
        raw = bytes(raw).decode("utf-8", errors="replace")

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            logger.warning(f"Failed to parse embedding for table {table_name}")
            return None

    if isinstance(raw, (dict, str)) or not hasattr(raw, "__iter__"):
        return None

    items = list(raw)
    if not items or any(isinstance(v, bool) for v in items):
        return None

    try:
        return [float(v) for v in items]
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric embedding for table {table_name}")
        return None


def parse_columns(raw: Any) -> List[str]:
    """Normalize a stored column list (list, JSON array or comma-joined text)."""
    if raw is None:
        return []

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                parsed = json.loads(text)
                if isinstance(parsed, list):
                    return [str(c) for c in parsed]
            except ValueError:
                pass
        return [c.strip() for c in text.split(",") if c.strip()]

    return [str(c) for c in raw]


def rank_descriptors(
    descriptors: Sequence[TableDescriptor],
    query_vector: Sequence[float],
    k: int = 2
) -> List[MatchResult]:
    """Rank descriptors by cosine similarity, skipping unusable embeddings."""
    scored: List[MatchResult] = []
    for descriptor in descriptors:
        if not descriptor.embedding:
            logger.debug(f"Skipping {descriptor.name}: no embedding")
            continue
        if len(descriptor.embedding) != len(query_vector):
            logger.warning(
                f"Skipping {descriptor.name}: embedding dimension "
                f"{len(descriptor.embedding)} != query dimension {len(query_vector)}"
            )
            continue
        similarity = cosine_similarity(query_vector, descriptor.embedding)
        scored.append(MatchResult(descriptor=descriptor, similarity=similarity))

    scored.sort(key=lambda m: m.similarity, reverse=True)
    return scored[:k]


class TableIndex:
    """Find the tables most relevant to a query embedding.

    Prefers pgvector's ``<=>`` operator in the database and falls back to
    ranking every descriptor in process when the extension is missing or
    the native query fails.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        table_name: str = "table_semantics",
        use_native: bool = True
    ):
        """Initialize Table Index.

        Args:
            pool: Shared connection pool
            table_name: Table holding table descriptors and their embeddings
            use_native: Try the pgvector path before the in-process fallback
        """
        self.pool = pool
        self.table_name = table_name
        self.use_native = use_native
        logger.info(f"TableIndex initialized (table={table_name}, native={use_native})")

    def find_top_matches(self, query_vector: Sequence[float], k: int = 2) -> List[MatchResult]:
        """Return at most ``k`` matches ordered by descending similarity."""
        if k <= 0 or not query_vector:
            return []

        matches = self._try_native(query_vector, k) if self.use_native else None
        if matches is None:
            matches = self._run_fallback(query_vector, k)

        logger.info(
            "Matched tables: "
            + (", ".join(f"{m.name} ({m.similarity:.3f})" for m in matches) or "none")
        )
        return matches

    def fetch_descriptors(self) -> List[TableDescriptor]:
        """Read every descriptor, embeddings included."""
        query = sql.SQL(
            "SELECT id, name, type, description, columns, {embed} FROM {table}"
        ).format(
            embed=sql.Identifier(EMBEDDING_COLUMN),
            table=sql.Identifier(self.table_name),
        )

        with self.pool.connection() as conn:
            cursor = conn.cursor(cursor_factory=extras.RealDictCursor)
            try:
                cursor.execute(query)
                rows = cursor.fetchall()
            finally:
                cursor.close()

        return [TableDescriptor.from_row(row) for row in rows]

    def _try_native(self, query_vector: Sequence[float], k: int) -> Optional[List[MatchResult]]:
        """Nearest-neighbour query in the database; None when unavailable."""
        vector_literal = "[" + ",".join(str(float(v)) for v in query_vector) + "]"
        query = sql.SQL(
            "SELECT id, name, type, description, columns, "
            "1 - ({embed}::vector <=> %s::vector) AS similarity "
            "FROM {table} "
            "WHERE {embed} IS NOT NULL "
            "ORDER BY {embed}::vector <=> %s::vector "
            "LIMIT %s"
        ).format(
            embed=sql.Identifier(EMBEDDING_COLUMN),
            table=sql.Identifier(self.table_name),
        )

        try:
            with self.pool.connection() as conn:
                cursor = conn.cursor(cursor_factory=extras.RealDictCursor)
                try:
                    cursor.execute("SELECT 1 FROM pg_extension WHERE extname = 'vector'")
                    if cursor.fetchone() is None:
                        logger.info("pgvector extension not installed, using in-process similarity")
                        return None

                    cursor.execute(query, (vector_literal, vector_literal, k))
                    rows = cursor.fetchall()
                finally:
                    cursor.close()
        except psycopg2.Error as e:
            logger.warning(f"Native similarity search failed, using fallback: {e}")
            return None

        matches = []
        for row in rows[:k]:
            descriptor = TableDescriptor.from_row(row)
            matches.append(MatchResult(descriptor=descriptor, similarity=float(row["similarity"])))
        return matches

    def _run_fallback(self, query_vector: Sequence[float], k: int) -> List[MatchResult]:
        """Rank every stored descriptor in process."""
        try:
            descriptors = self.fetch_descriptors()
        except psycopg2.Error as e:
            logger.error(f"Could not load table descriptors: {e}")
            return []

        return rank_descriptors(descriptors, query_vector, k)
