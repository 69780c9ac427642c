"""Shared pytest fixtures for Secure Query Agent tests."""

import os
import sys
import pytest
from unittest.mock import MagicMock
from contextlib import contextmanager
import httpx

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set test environment variables before importing app modules
os.environ["LANGFUSE_PUBLIC_KEY"] = "test-public-key"
os.environ["LANGFUSE_SECRET_KEY"] = "test-secret-key"
os.environ["LANGFUSE_TRACING_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["ANTHROPIC_API_KEY"] = "test-anthropic-key"
os.environ["LLM_PROVIDER"] = "openai"

from agents.sql_agent.retriever import TableDescriptor, MatchResult  # noqa: E402


# ---------------------------------------------------------------------------
# OpenAI Mock Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_openai_embedding_response():
    """Mock OpenAI embedding response."""
    return [0.1] * 1536  # text-embedding-3-small returns 1536 dimensions


@pytest.fixture
def mock_openai_client(mock_openai_embedding_response):
    """Mock OpenAI client for embeddings and chat completions."""
    mock_client = MagicMock()

    mock_embedding = MagicMock()
    mock_embedding.embedding = mock_openai_embedding_response
    mock_client.embeddings.create.return_value = MagicMock(data=[mock_embedding])

    mock_message = MagicMock()
    mock_message.content = "SELECT id, status FROM orders LIMIT 10;"
    mock_choice = MagicMock()
    mock_choice.message = mock_message
    mock_client.chat.completions.create.return_value = MagicMock(choices=[mock_choice])

    return mock_client


# ---------------------------------------------------------------------------
# Anthropic Mock Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_anthropic_sql_response():
    """Mock Anthropic API response for SQL generation."""
    return 'SELECT "orderNumber", "totalAmount" FROM orders ORDER BY "createdAt" DESC LIMIT 5;'


@pytest.fixture
def mock_anthropic_client(mock_anthropic_sql_response):
    """Mock Anthropic client."""
    mock_client = MagicMock()
    mock_response = MagicMock()
    mock_text_block = MagicMock()

    mock_text_block.text = mock_anthropic_sql_response

    mock_response.content = [mock_text_block]
    mock_client.messages.create.return_value = mock_response

    return mock_client


@pytest.fixture
def mock_gateway():
    """Mock LLMGateway with a fixed embedding and completion."""
    gateway = MagicMock()
    gateway.embed.return_value = [1.0, 0.0, 0.0]
    gateway.complete.return_value = "SELECT id, status FROM orders LIMIT 10;"
    return gateway


# ---------------------------------------------------------------------------
# Table Semantics Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_descriptors():
    """Three descriptors with 3-dimensional embeddings."""
    return [
        TableDescriptor(
            id="1",
            name="orders",
            kind="table",
            description="Customer orders with totals and status",
            columns=["id", "orderNumber", "totalAmount", "status", "customerId", "createdAt"],
            embedding=[1.0, 0.0, 0.0],
        ),
        TableDescriptor(
            id="2",
            name="vendor_location",
            kind="table",
            description="Physical vendor locations",
            columns=["id", "vendorId", "isActive", "address"],
            embedding=[0.0, 1.0, 0.0],
        ),
        TableDescriptor(
            id="3",
            name="driver_stats",
            kind="materialized_view",
            description="Aggregated driver delivery statistics",
            columns=["driverId", "deliveries", "rating"],
            embedding=[0.6, 0.8, 0.0],
        ),
    ]


@pytest.fixture
def sample_matches(sample_descriptors):
    """Top two matches for the orders question."""
    return [
        MatchResult(descriptor=sample_descriptors[0], similarity=0.91),
        MatchResult(descriptor=sample_descriptors[2], similarity=0.6),
    ]


@pytest.fixture
def sample_semantics_rows():
    """Raw table_semantics rows as RealDictCursor returns them."""
    return [
        {
            "id": 1,
            "name": "orders",
            "type": "table",
            "description": "Customer orders with totals and status",
            "columns": "id,orderNumber,totalAmount,status",
            "embed": "[1.0, 0.0, 0.0]",
        },
        {
            "id": 2,
            "name": "vendor_location",
            "type": "table",
            "description": "Physical vendor locations",
            "columns": ["id", "vendorId", "isActive"],
            "embed": [0.0, 1.0, 0.0],
        },
        {
            "id": 3,
            "name": "driver_stats",
            "type": "material_view",
            "description": None,
            "columns": '["driverId", "deliveries"]',
            "embed": None,
        },
    ]


# ---------------------------------------------------------------------------
# Database Mock Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_db_cursor():
    """Mock database cursor with sample results."""
    cursor = MagicMock()
    cursor.description = [("id",), ("orderNumber",), ("totalAmount",)]
    cursor.fetchall.return_value = [
        {"id": 1, "orderNumber": "ORD-1001", "totalAmount": 42.5},
        {"id": 2, "orderNumber": "ORD-1002", "totalAmount": 17.0},
    ]
    return cursor


@pytest.fixture
def mock_db_connection(mock_db_cursor):
    """Mock database connection."""
    conn = MagicMock()
    conn.cursor.return_value = mock_db_cursor
    return conn


@pytest.fixture
def mock_pool(mock_db_connection):
    """Mock ConnectionPool handing out ``mock_db_connection``."""
    pool = MagicMock()
    pool.acquire.return_value = mock_db_connection

    @contextmanager
    def _connection():
        yield mock_db_connection

    pool.connection.side_effect = _connection
    return pool


@pytest.fixture
def sample_query_results():
    """Sample query results data."""
    return [
        {"id": 1, "orderNumber": "ORD-1001", "totalAmount": 42.5, "status": "delivered"},
        {"id": 2, "orderNumber": "ORD-1002", "totalAmount": 17.0, "status": "pending"},
    ]


# ---------------------------------------------------------------------------
# Sample Request Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_query_request():
    """Sample query request data."""
    return {
        "userId": "user-123",
        "query": "What are my latest orders?",
    }


# ---------------------------------------------------------------------------
# Test Client Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def test_settings():
    """Test settings with mock values."""
    return {
        "DB_HOST": "localhost",
        "DB_PORT": 5432,
        "DB_NAME": "test_db",
        "DB_USER": "test_user",
        "DB_PASSWORD": "test_password",
        "OPENAI_API_KEY": "test-openai-key",
        "OPENAI_GENERAL_MODEL": "gpt-4o",
        "ANTHROPIC_API_KEY": "test-anthropic-key",
        "ANTHROPIC_SQL_MODEL": "claude-3-5-haiku-20241022",
        "ANTHROPIC_MAX_TOKENS": 1000,
        "QUERY_TIMEOUT": 30,
    }


# ---------------------------------------------------------------------------
# Error Response Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_openai_error():
    """Mock OpenAI API error."""
    from openai import APIError
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    return APIError(message="API rate limit exceeded", request=request, body=None)


@pytest.fixture
def mock_db_error():
    """Mock database error."""
    import psycopg2
    return psycopg2.OperationalError("Connection refused")


# ---------------------------------------------------------------------------
# Parametrized Test Data
# ---------------------------------------------------------------------------

@pytest.fixture(params=[
    ("SELECT * FROM orders", True),
    ("select id from orders where status = 'pending'", True),
    ("SELECT o.id, v.address FROM orders o JOIN vendor_location v ON v.id = o.id", True),
    ("DELETE FROM orders", False),
    ("DROP TABLE orders", False),
    ("INSERT INTO orders VALUES (1)", False),
    ("UPDATE orders SET status = 'x'", False),
    ("SELECT * FROM orders; DROP TABLE orders", False),
    ("SELECT set_config('app.current_user_id', 'admin', false)", False),
    ("WITH x AS (SELECT 1) SELECT * FROM x", False),
])
def sql_validation_cases(request):
    """Parametrized SQL validation test cases."""
    return request.param
