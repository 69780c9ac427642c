"""SQL Agent - table matching, SQL synthesis and query guarding."""

from .generator import SQLAgent, extract_sql
from .guard import QueryGuard, Executable, Rejected, GuardVerdict
from .retriever import (
    TableIndex,
    TableDescriptor,
    MatchResult,
    cosine_similarity,
    parse_embedding,
    rank_descriptors,
)
from .prompts import SQL_GENERATION_SYSTEM_PROMPT

__all__ = [
    "SQLAgent",
    "extract_sql",
    "QueryGuard",
    "Executable",
    "Rejected",
    "GuardVerdict",
    "TableIndex",
    "TableDescriptor",
    "MatchResult",
    "cosine_similarity",
    "parse_embedding",
    "rank_descriptors",
    "SQL_GENERATION_SYSTEM_PROMPT",
]
