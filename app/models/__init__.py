"""Pydantic models for request/response validation."""

from .schemas import (
    QueryRequest,
    AnswerResponse,
    MatchedTable,
    ValidationVerdict,
    QueryTraceResponse,
    TableSemanticsInfo,
    HealthResponse,
)

__all__ = [
    "QueryRequest",
    "AnswerResponse",
    "MatchedTable",
    "ValidationVerdict",
    "QueryTraceResponse",
    "TableSemanticsInfo",
    "HealthResponse",
]
