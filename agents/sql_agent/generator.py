"""SQL Agent: turns a question and matched tables into a candidate query."""

import logging
import re
from typing import Sequence

from agents.llm_gateway import LLMGateway
from .prompts import (
    NOT_AVAILABLE,
    SQL_GENERATION_SYSTEM_PROMPT,
    SQL_GENERATION_TEMPLATE,
    TABLE_CONTEXT_TEMPLATE,
)
from .retriever import EMBEDDING_COLUMN, MatchResult

logger = logging.getLogger(__name__)

_FENCE_OPEN = re.compile(r"^```(?:sql|postgresql|postgres|psql)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


def extract_sql(response: str) -> str:
    """Strip wrapping code fences and surrounding whitespace."""
    sql_query = (response or "").strip()
    sql_query = _FENCE_OPEN.sub("", sql_query)
    sql_query = _FENCE_CLOSE.sub("", sql_query)
    return sql_query.strip()


def format_tables_context(matched_tables: Sequence[MatchResult]) -> str:
    """Render matched tables for the generation prompt."""
    blocks = []
    for index, match in enumerate(matched_tables, start=1):
        descriptor = match.descriptor
        blocks.append(TABLE_CONTEXT_TEMPLATE.format(
            index=index,
            name=descriptor.name,
            description=descriptor.description or NOT_AVAILABLE,
            columns=", ".join(descriptor.columns) or NOT_AVAILABLE,
            score=f"{match.similarity * 100:.2f}",
        ))
    return "\n\n".join(blocks)


class SQLAgent:
    """Generate read-only PostgreSQL queries constrained to matched tables."""

    def __init__(self, gateway: LLMGateway):
        """Initialize SQL Agent.

        Args:
            gateway: LLM gateway used for completion
        """
        self.gateway = gateway
        logger.info("SQLAgent initialized")

    def build_prompt(self, query: str, matched_tables: Sequence[MatchResult]) -> str:
        return SQL_GENERATION_TEMPLATE.format(
            query=query,
            tables_context=format_tables_context(matched_tables),
            embedding_column=EMBEDDING_COLUMN,
        )

    def synthesize(self, query: str, matched_tables: Sequence[MatchResult]) -> str:
        """Generate a candidate SQL query.

        Args:
            query: User's natural language question
            matched_tables: Top matches from the table index

        Returns:
            De-fenced, trimmed query text (not yet validated)

        Raises:
            GenerationError: If the model returned nothing usable
        """
        logger.info(f"Generating SQL for query: {query[:100]}...")
        logger.debug(f"Matched tables count: {len(matched_tables)}")

        prompt = self.build_prompt(query, matched_tables)
        response = self.gateway.complete(prompt, system=SQL_GENERATION_SYSTEM_PROMPT)
        logger.debug(f"Raw model response: {response}")

        sql_query = extract_sql(response)
        logger.info(f"Generated SQL: {sql_query[:200]}...")
        return sql_query
