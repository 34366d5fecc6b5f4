"""
Pytest configuration and shared fixtures for the storefront search tests.
"""
import os
import sys
from typing import List, Optional

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

@pytest.fixture
def sample_product() -> dict:
    """Sample Weaviate GraphQL object for a product."""
    return {
        "name": "iPhone 15 Blue 128GB",
        "brand": "Apple",
        "color": "Blue",
        "category": "Smartphone",
        "price": 479,
        "description": "The iPhone 15 in stunning Blue finish with A16 Bionic chip.",
        "_additional": {"score": "0.91", "distance": None},
    }


@pytest.fixture
def graphql_body(sample_product) -> dict:
    """GraphQL response with three scored products."""
    second = dict(sample_product, name="iPhone 15 Pro Blue Titanium", price=999,
                  _additional={"score": "0.5", "distance": None})
    third = dict(sample_product, name="Google Pixel 8 Bay Blue", brand="Google", price=349,
                 _additional={"score": "0.71", "distance": None})
    return {"data": {"Get": {"Product": [sample_product, second, third]}}}


@pytest.fixture
def sample_vector() -> List[float]:
    """Small deterministic query embedding."""
    return [0.125, -0.5, 0.0333333333, 1e-05]


# ============================================================================
# Fixtures: Fake Collaborators
# ============================================================================

class FakeEmbedder:
    """Records embed() calls and returns a fixed vector."""

    def __init__(self, vector: Optional[List[float]] = None, error: Optional[Exception] = None):
        self.vector = vector if vector is not None else [0.1, 0.2, 0.3]
        self.error = error
        self.calls: List[str] = []

    def embed(self, text: str) -> List[float]:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.vector)


class FakeExecutor:
    """Records compiled queries and returns a canned ExecutionResult."""

    def __init__(self, result=None, error: Optional[Exception] = None):
        from search.models import ExecutionResult
        self.result = result if result is not None else ExecutionResult()
        self.error = error
        self.queries = []

    def execute(self, compiled):
        self.queries.append(compiled)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def make_embedder():
    """Factory for FakeEmbedder(vector=..., error=...)."""
    return FakeEmbedder


@pytest.fixture
def make_executor():
    """Factory for FakeExecutor(result=..., error=...)."""
    return FakeExecutor


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def scored_records():
    """Records with hybrid scores 0.9, 0.5, 0.71 (in backend order)."""
    from search.models import RankedRecord
    return [
        RankedRecord(properties={"name": "A", "price": 479, "color": "Blue"}, score=0.9),
        RankedRecord(properties={"name": "B", "price": 999, "color": "Blue"}, score=0.5),
        RankedRecord(properties={"name": "C", "price": 349, "color": "Blue"}, score=0.71),
    ]


@pytest.fixture
def fake_executor(scored_records) -> FakeExecutor:
    from search.models import ExecutionResult
    return FakeExecutor(ExecutionResult(records=tuple(scored_records)))


@pytest.fixture
def test_settings():
    from config.settings import get_settings_for_testing
    return get_settings_for_testing()


@pytest.fixture
def search_service(fake_embedder, fake_executor, test_settings):
    """SearchService wired to fakes (no network)."""
    from search.search_service import SearchService
    return SearchService(embedder=fake_embedder, executor=fake_executor, settings=test_settings)


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app():
    """Get the FastAPI application."""
    from api.app import create_app
    return create_app()


@pytest.fixture
def test_client(app, search_service):
    """TestClient with the search service singleton replaced by the fake-wired one."""
    from unittest.mock import patch
    from fastapi.testclient import TestClient

    with patch("api.routes.search.get_search_service", return_value=search_service):
        with TestClient(app) as client:
            yield client


# ============================================================================
# Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")


def pytest_collection_modifyitems(config, items):
    """Auto-skip integration tests if no Weaviate URL is configured."""
    skip_integration = pytest.mark.skip(reason="Integration tests require WEAVIATE_URL")
    weaviate_url = os.getenv("WEAVIATE_URL")

    for item in items:
        if "integration" in item.keywords and not weaviate_url:
            item.add_marker(skip_integration)
