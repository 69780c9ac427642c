"""Answer Agent: turns result rows into a conversational reply."""

import json
import logging
from typing import Any, Dict, List, Sequence

from agents.llm_gateway import LLMGateway
from agents.sql_agent.retriever import EMBEDDING_COLUMN, MatchResult
from .prompts import ANSWER_TEMPLATE, NO_RESULTS_CONTEXT

logger = logging.getLogger(__name__)


def strip_internal_columns(rows: Sequence[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Copy rows without the embedding column."""
    return [
        {key: value for key, value in row.items() if key != EMBEDDING_COLUMN}
        for row in rows
    ]


class AnswerAgent:
    """Write the final answer from the question and the rows it produced."""

    def __init__(self, gateway: LLMGateway):
        self.gateway = gateway
        logger.info("AnswerAgent initialized")

    def build_prompt(self, query: str, rows: Sequence[Dict[str, Any]]) -> str:
        cleaned = strip_internal_columns(rows)
        if cleaned:
            results_context = json.dumps(cleaned, indent=2, default=str)
        else:
            results_context = NO_RESULTS_CONTEXT
        return ANSWER_TEMPLATE.format(query=query, results_context=results_context)

    def answer(
        self,
        query: str,
        matched_tables: Sequence[MatchResult],
        rows: Sequence[Dict[str, Any]]
    ) -> str:
        """Generate a natural-language answer.

        Args:
            query: Original user question
            matched_tables: Tables the question was matched to
            rows: Result rows visible to the caller (possibly empty)

        Raises:
            GenerationError: If the model returned nothing usable
        """
        logger.info(f"Generating answer for: {query[:100]}...")
        logger.debug(
            f"Answer context: {len(rows)} rows from "
            f"{', '.join(m.name for m in matched_tables) or 'no tables'}"
        )

        response = self.gateway.complete(self.build_prompt(query, rows))

        logger.info(f"Final answer generated: {response[:100]}...")
        return response.strip()
