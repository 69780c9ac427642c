"""Streamlit components for the question form and the trace viewer."""

from .chat_ui import render_chat_interface, render_example_queries
from .result_viewer import render_results

__all__ = ["render_chat_interface", "render_example_queries", "render_results"]
