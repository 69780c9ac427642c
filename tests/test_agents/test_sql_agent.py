"""Tests for the SQL Agent."""

import pytest
from unittest.mock import MagicMock

from agents.llm_gateway import GenerationError
from agents.sql_agent.generator import SQLAgent, extract_sql, format_tables_context
from agents.sql_agent.prompts import SQL_GENERATION_SYSTEM_PROMPT
from agents.sql_agent.retriever import TableDescriptor, MatchResult


class TestExtractSQL:
    """Test cases for extract_sql."""

    def test_plain_sql_is_trimmed(self):
        """Test surrounding whitespace is removed."""
        assert extract_sql("  SELECT 1;  \n") == "SELECT 1;"

    def test_sql_fence_removed(self):
        """Test ```sql fences are stripped."""
        assert extract_sql("```sql\nSELECT id FROM orders;\n```") == "SELECT id FROM orders;"

    def test_bare_fence_removed(self):
        """Test fences without a language tag are stripped."""
        assert extract_sql("```\nSELECT id FROM orders\n```") == "SELECT id FROM orders"

    def test_fence_on_same_line(self):
        """Test a fence immediately followed by SQL keeps the SQL intact."""
        assert extract_sql("```SELECT id FROM orders```") == "SELECT id FROM orders"

    def test_empty_response(self):
        """Test empty or missing responses give an empty string."""
        assert extract_sql("") == ""
        assert extract_sql(None) == ""


class TestSQLAgent:
    """Test cases for SQLAgent class."""

    def test_format_tables_context(self, sample_matches):
        """Test each matched table is rendered with its score as a percentage."""
        context = format_tables_context(sample_matches)

        assert "Table 1: orders" in context
        assert "Description: Customer orders with totals and status" in context
        assert "Columns: id, orderNumber, totalAmount, status, customerId, createdAt" in context
        assert "Relevance Score: 91.00%" in context
        assert "Table 2: driver_stats" in context
        assert "Relevance Score: 60.00%" in context

    def test_format_tables_context_missing_fields(self):
        """Test absent description and columns render as N/A."""
        match = MatchResult(
            descriptor=TableDescriptor(id="9", name="bare", columns=[]),
            similarity=0.5,
        )

        context = format_tables_context([match])

        assert "Description: N/A" in context
        assert "Columns: N/A" in context

    def test_build_prompt_contains_question_and_rules(self, mock_gateway, sample_matches):
        """Test the prompt carries the question, the tables and the embed rule."""
        agent = SQLAgent(gateway=mock_gateway)

        prompt = agent.build_prompt("What are my latest orders?", sample_matches)

        assert 'User Query: "What are my latest orders?"' in prompt
        assert "Table 1: orders" in prompt
        assert "NEVER select the 'embed' column" in prompt
        assert "ONLY use the exact table names" in prompt

    def test_synthesize_success(self, mock_gateway, sample_matches):
        """Test synthesize calls the gateway with the system prompt and de-fences."""
        mock_gateway.complete.return_value = "```sql\nSELECT id FROM orders LIMIT 5;\n```"
        agent = SQLAgent(gateway=mock_gateway)

        sql_query = agent.synthesize("Show five orders", sample_matches)

        assert sql_query == "SELECT id FROM orders LIMIT 5;"
        call_kwargs = mock_gateway.complete.call_args[1]
        assert call_kwargs["system"] == SQL_GENERATION_SYSTEM_PROMPT

    def test_synthesize_propagates_generation_error(self, mock_gateway, sample_matches):
        """Test generation failures surface to the caller."""
        mock_gateway.complete.side_effect = GenerationError("No response from openai")
        agent = SQLAgent(gateway=mock_gateway)

        with pytest.raises(GenerationError):
            agent.synthesize("Show orders", sample_matches)
