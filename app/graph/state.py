"""
State definition for the LangGraph workflow.
"""

from datetime import datetime, timezone
from typing import TypedDict, Optional, List, Dict, Any

from agents.sql_agent.retriever import MatchResult


class QueryTrace(TypedDict):
    """State passed between nodes in the graph; returned as the request trace."""

    # Input
    caller_id: str
    question: str

    # Matching
    query_embedding: Optional[List[float]]
    matched_tables: List[MatchResult]

    # SQL generation and validation
    generated_sql: Optional[str]
    normalized_sql: Optional[str]
    validation: Optional[Dict[str, Any]]

    # Execution
    rows: List[Dict[str, Any]]

    # Final result
    answer: Optional[str]
    generation_error: Optional[str]
    execution_error: Optional[str]
    timestamp: str


def build_initial_trace(*, caller_id: str, question: str) -> QueryTrace:
    """Create a fully-initialized trace for graph executions."""

    return QueryTrace(
        caller_id=caller_id,
        question=question,
        query_embedding=None,
        matched_tables=[],
        generated_sql=None,
        normalized_sql=None,
        validation=None,
        rows=[],
        answer=None,
        generation_error=None,
        execution_error=None,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
