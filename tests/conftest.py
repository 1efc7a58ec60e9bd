"""
Pytest configuration and shared fixtures for the search service tests.
"""
import os
import sys
from types import SimpleNamespace
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(__file__)), "src"))

# Load environment variables
from dotenv import load_dotenv
load_dotenv(os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

# Required settings must exist before api.app is imported
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-key")


# ============================================================================
# Fixtures: Test Data Factories
# ============================================================================

def make_product(product_id: int, **overrides: Any) -> Dict[str, Any]:
    """Build a ProductCard row; every attribute can be overridden."""
    product = {
        "id": product_id,
        "name": f"Test Product {product_id}",
        "brand": "TestBrand",
        "price": 4500,
        "category": "Kurta",
        "fabric": "Lawn",
        "color": "Blue",
        "style": "Casual",
        "gender": "Female",
        "is_new": None,
        "discount": 0,
        "in_stock": True,
        "Scraped_at": f"2025-01-{product_id % 28 + 1:02d}T10:00:00+00:00",
        "image_url": f"https://example.com/images/{product_id}.jpg",
        "product_url": f"https://example.com/products/{product_id}",
    }
    product.update(overrides)
    return product


@pytest.fixture
def product_factory():
    """``product_factory(id, **columns)`` builds one ProductCard row."""
    return make_product


@pytest.fixture
def sample_products() -> List[Dict[str, Any]]:
    """A small mixed catalog page, in store (most recent first) order."""
    return [
        make_product(1, name="Blue Lawn Shirt", category="Shirt", color="Blue", gender="Male"),
        make_product(2, name="Red Silk Kurta", category="Kurta", fabric="Silk", color="Red"),
        make_product(3, name="Red Chiffon Dress", category="Dress", fabric="Chiffon", color="Red"),
        make_product(4, name="Embroidered Red Silk Kurta", category="Kurta", fabric="Silk",
                     color="Maroon Red", style="Embroidered", is_new="New", discount=20),
    ]


# ============================================================================
# Fixtures: Settings
# ============================================================================

@pytest.fixture
def test_settings():
    """Settings with LLM extraction configured but no real key."""
    from config.settings import get_settings_for_testing
    return get_settings_for_testing(openai_api_key="sk-test")


@pytest.fixture
def rules_only_settings():
    """Settings with no OpenAI key: rule-based extraction only."""
    from config.settings import get_settings_for_testing
    return get_settings_for_testing(openai_api_key="")


# ============================================================================
# Fixtures: Mock Services
# ============================================================================

def make_query_builder(data: Optional[list] = None, count: Optional[int] = None) -> MagicMock:
    """Chainable supabase-py query builder whose execute() returns ``data``."""
    builder = MagicMock()
    for method in ("select", "eq", "gt", "gte", "lte", "ilike", "or_",
                   "order", "range", "limit", "insert"):
        getattr(builder, method).return_value = builder
    builder.execute.return_value = SimpleNamespace(data=data or [], count=count)
    return builder


@pytest.fixture
def query_builder_factory():
    """``query_builder_factory(data, count)`` builds a chainable query mock."""
    return make_query_builder


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client; ``client.table(...)`` returns one shared builder."""
    mock_client = MagicMock()
    mock_client.table.return_value = make_query_builder()
    return mock_client


def make_completion(content: Optional[str]) -> SimpleNamespace:
    """Shape of an OpenAI chat completion response."""
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def mock_openai_client():
    """Mock OpenAI client; set ``chat.completions.create`` per test."""
    client = MagicMock()
    client.chat.completions.create.return_value = make_completion("{}")
    return client


# ============================================================================
# Fixtures: FastAPI Test Client
# ============================================================================

@pytest.fixture
def app():
    """Get the FastAPI application."""
    from api.app import create_app
    return create_app()


@pytest.fixture
def client(app):
    """Sync HTTP client for testing FastAPI endpoints."""
    from fastapi.testclient import TestClient
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============================================================================
# Markers auto-use
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "supabase: marks tests that require Supabase")


def pytest_collection_modifyitems(config, items):
    """Auto-skip Supabase tests if no real project is configured."""
    skip_supabase = pytest.mark.skip(reason="Supabase tests require credentials")
    supabase_url = os.getenv("SUPABASE_URL", "")

    for item in items:
        if "supabase" in item.keywords and "test.supabase.co" in supabase_url:
            item.add_marker(skip_supabase)
