"""
LangGraph workflow definition.
"""

import logging
import time

from langgraph.graph import StateGraph, START, END
from langgraph.graph.state import CompiledStateGraph

from app.graph.state import QueryTrace, build_initial_trace
from app.graph.nodes import (
    embed_node,
    match_node,
    sql_generator_node,
    guard_node,
    executor_node,
    answer_node,
)

logger = logging.getLogger(__name__)


def should_generate_sql(state: QueryTrace) -> str:
    """Conditional edge: Only synthesize SQL when tables were matched."""
    if state.get("matched_tables"):
        return "sql_generator"
    logger.info("No tables matched; answering without data")
    return "answer"


def should_validate_sql(state: QueryTrace) -> str:
    """Conditional edge: Skip the guard when SQL generation failed.

    Empty output still goes through the guard so the trace records a verdict.
    """
    if state.get("generated_sql") is not None:
        return "guard"
    return "answer"


def should_execute(state: QueryTrace) -> str:
    """Conditional edge: Only executable SQL reaches the database."""
    validation = state.get("validation") or {}
    if validation.get("valid") and state.get("normalized_sql"):
        return "executor"
    return "answer"


def create_graph() -> CompiledStateGraph[QueryTrace, None, QueryTrace, QueryTrace]:
    """
    Create and compile the LangGraph workflow.

    Graph structure:
    START -> embed -> match -> [sql_generator -> guard -> [executor]] -> answer -> END
    """
    # Create graph
    graph_builder = StateGraph(QueryTrace)

    # Add nodes
    graph_builder.add_node("embed", embed_node)
    graph_builder.add_node("match", match_node)
    graph_builder.add_node("sql_generator", sql_generator_node)
    graph_builder.add_node("guard", guard_node)
    graph_builder.add_node("executor", executor_node)
    graph_builder.add_node("answer", answer_node)

    # Add edges
    graph_builder.add_edge(START, "embed")
    graph_builder.add_edge("embed", "match")
    graph_builder.add_conditional_edges(
        "match", should_generate_sql, ["sql_generator", "answer"]
    )
    graph_builder.add_conditional_edges(
        "sql_generator", should_validate_sql, ["guard", "answer"]
    )
    graph_builder.add_conditional_edges(
        "guard", should_execute, ["executor", "answer"]
    )
    graph_builder.add_edge("executor", "answer")
    graph_builder.add_edge("answer", END)

    # Compile
    graph = graph_builder.compile()

    logger.info("LangGraph workflow compiled successfully")
    return graph


# Create singleton graph instance
workflow_graph = create_graph()


def run_agent(caller_id: str, question: str) -> QueryTrace:
    """Answer ``question`` on behalf of ``caller_id`` and return the full trace."""
    logger.info(f"Running agent for caller {caller_id}: {question[:100]}...")
    start_time = time.time()

    initial = build_initial_trace(caller_id=caller_id, question=question)
    result = workflow_graph.invoke(initial)

    logger.info(f"Agent finished in {time.time() - start_time:.2f}s")
    return result
