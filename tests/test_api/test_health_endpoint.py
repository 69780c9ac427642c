"""Tests for the health check, root and docs endpoints."""

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient


@pytest.fixture
def test_client():
    """Create test client."""
    with patch.dict('os.environ', {
        'OPENAI_API_KEY': 'test-key',
        'ANTHROPIC_API_KEY': 'test-key',
    }):
        from app.main import app
        client = TestClient(app)
        yield client


class TestHealthEndpoint:
    """Test cases for the /health endpoint."""

    def test_health_check_returns_200(self, test_client):
        """Test that health check returns 200 OK."""
        response = test_client.get("/health")

        assert response.status_code == 200

    def test_health_check_returns_status(self, test_client):
        """Test that health check returns status field."""
        data = test_client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"

    def test_health_check_returns_timestamp(self, test_client):
        """Test that health check returns an ISO timestamp."""
        data = test_client.get("/health").json()

        assert "T" in data["timestamp"]

    def test_health_check_reports_services(self, test_client):
        """Test that health check lists the backing services."""
        data = test_client.get("/health").json()

        assert data["services"]["database"] == "ok"
        assert data["services"]["llm"] == "openai"


class TestRootEndpoint:
    """Test cases for the root endpoint."""

    def test_root_returns_message(self, test_client):
        """Test that root endpoint returns welcome message."""
        response = test_client.get("/")
        data = response.json()

        assert response.status_code == 200
        assert "Secure Query Agent API" in data["message"]
        assert data["docs"] == "/docs"


class TestDocsEndpoint:
    """Test cases for the OpenAPI docs endpoint."""

    def test_docs_endpoint_accessible(self, test_client):
        """Test that /docs endpoint is accessible."""
        response = test_client.get("/docs")

        assert response.status_code == 200

    def test_openapi_includes_routes(self, test_client):
        """Test that the OpenAPI schema lists every public route."""
        data = test_client.get("/openapi.json").json()

        assert "/sn-agent/query" in data["paths"]
        assert "/sn-agent/query/debug" in data["paths"]
        assert "/table-semantics/" in data["paths"]
        assert "/health" in data["paths"]


class TestCORSMiddleware:
    """Test cases for CORS middleware."""

    def test_cors_allows_all_origins(self, test_client):
        """Test that CORS allows all origins."""
        response = test_client.options(
            "/health",
            headers={
                "Origin": "https://example.com",
                "Access-Control-Request-Method": "GET"
            }
        )

        # With allow_credentials=True, Starlette echoes the request origin
        # instead of returning the literal '*'
        origin = response.headers.get("access-control-allow-origin")
        assert origin in ("*", "https://example.com")

    def test_cors_preflight_for_query(self, test_client):
        """Test that CORS preflight succeeds for the query endpoint."""
        response = test_client.options(
            "/sn-agent/query",
            headers={
                "Origin": "https://example.com",
                "Access-Control-Request-Method": "POST"
            }
        )

        assert response.status_code in [200, 204]
