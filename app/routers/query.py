"""
Query Router: runs the agent graph (embed -> match -> SQL -> guard -> RLS execute -> answer)
on behalf of the calling user.
"""

import logging

from fastapi import APIRouter, HTTPException

from app.graph import run_agent, QueryTrace
from app.models.schemas import (
    QueryRequest,
    AnswerResponse,
    QueryTraceResponse,
    MatchedTable,
    ValidationVerdict,
)
from agents.answer_agent import FALLBACK_ANSWER


logger = logging.getLogger(__name__)
router = APIRouter()


def _trace_to_response(trace: QueryTrace) -> QueryTraceResponse:
    validation = trace.get("validation")
    rows = trace.get("rows") or []
    return QueryTraceResponse(
        user_id=trace["caller_id"],
        query=trace["question"],
        response=trace.get("answer") or FALLBACK_ANSWER,
        matched_tables=[MatchedTable(**m.to_dict()) for m in trace.get("matched_tables") or []],
        generated_sql=trace.get("generated_sql"),
        normalized_sql=trace.get("normalized_sql"),
        validation=ValidationVerdict(**validation) if validation else None,
        rows=rows,
        row_count=len(rows),
        generation_error=trace.get("generation_error"),
        execution_error=trace.get("execution_error"),
        timestamp=trace["timestamp"],
    )


@router.post("/query", response_model=AnswerResponse)
def answer_query(request: QueryRequest) -> AnswerResponse:
    """
    Main query endpoint. Always answers conversationally; technical errors
    never reach the caller.
    """
    logger.info(f"Received query from {request.user_id}: {request.query[:120]}...")

    try:
        trace = run_agent(request.user_id, request.query)
        answer = trace.get("answer") or FALLBACK_ANSWER
    except Exception as e:
        logger.exception(f"Unhandled error while processing query: {e}")
        answer = FALLBACK_ANSWER

    return AnswerResponse(
        user_id=request.user_id,
        query=request.query,
        response=answer,
    )


@router.post("/query/debug", response_model=QueryTraceResponse)
def debug_query(request: QueryRequest) -> QueryTraceResponse:
    """
    Same as the main endpoint, but returns the full trace: matched tables,
    SQL, guard verdict, rows and any recorded errors.
    """
    logger.info(f"Received debug query from {request.user_id}: {request.query[:120]}...")

    try:
        trace = run_agent(request.user_id, request.query)
    except Exception as e:
        logger.exception(f"Unhandled error while processing debug query: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return _trace_to_response(trace)
