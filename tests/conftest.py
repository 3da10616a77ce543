"""
Test configuration and fixtures for extract-colors tests.
"""
import pytest
from fastapi.testclient import TestClient

# Import the main app
from main import app


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from extract_colors.services.observability import get_performance_collector
    from extract_colors.utils.metrics import reset_metrics

    reset_metrics()
    get_performance_collector().reset()
