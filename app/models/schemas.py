"""Pydantic models for API schemas."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class QueryRequest(BaseModel):
    """Request model for query endpoints."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1, description="Caller identity for row-level security")
    query: str = Field(..., min_length=1, description="User question (cannot be empty)")

    @field_validator('user_id', 'query')
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Validate that the value is not just whitespace."""
        if not v or not v.strip():
            raise ValueError('Value cannot be empty or whitespace')
        return v.strip()


class AnswerResponse(BaseModel):
    """Response model for the answer endpoint."""
    user_id: str
    query: str
    response: str
    timestamp: str = Field(default_factory=_utc_now)


class MatchedTable(BaseModel):
    """A table descriptor matched to the question."""
    id: Optional[Any] = None
    name: str
    kind: str
    description: Optional[str] = None
    columns: List[str] = []
    similarity: float


class ValidationVerdict(BaseModel):
    """Outcome of the query guard."""
    valid: bool
    reason: Optional[str] = None


class QueryTraceResponse(BaseModel):
    """Full record of one request, for debugging."""
    user_id: str
    query: str
    response: str
    matched_tables: List[MatchedTable] = []
    generated_sql: Optional[str] = None
    normalized_sql: Optional[str] = None
    validation: Optional[ValidationVerdict] = None
    rows: List[Dict[str, Any]] = []
    row_count: int = 0
    generation_error: Optional[str] = None
    execution_error: Optional[str] = None
    timestamp: str = Field(default_factory=_utc_now)


class TableSemanticsInfo(BaseModel):
    """Summary of one stored table descriptor."""
    id: Optional[Any] = None
    name: str
    kind: str
    description: Optional[str] = None
    columns: List[str] = []
    has_embedding: bool
    embedding_dimension: int = 0


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str
    timestamp: str
    services: dict
