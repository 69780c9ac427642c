"""
LangGraph workflow module.
"""

from app.graph.graph import workflow_graph, run_agent
from app.graph.state import QueryTrace, build_initial_trace

__all__ = ["workflow_graph", "run_agent", "QueryTrace", "build_initial_trace"]
