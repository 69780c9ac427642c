"""Answer Agent - conversational answers from query results."""

from .answerer import AnswerAgent, strip_internal_columns
from .prompts import FALLBACK_ANSWER

__all__ = ["AnswerAgent", "strip_internal_columns", "FALLBACK_ANSWER"]
