"""Pytest configuration and fixtures."""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DRY_RUN"] = "true"
os.environ["DEBUG"] = "false"
os.environ["REDIS_URL"] = ""
os.environ["ONEINCH_API_KEY"] = ""

from griffin.api.app import create_app
from griffin.api.dependencies import Services, build_services
from griffin.config import reset_settings_cache

from factories import make_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
async def services(settings) -> Services:
    """Dry-run service graph with an initialized token catalog."""
    services = build_services(settings)
    await services.tokens.initialize(services.token_sources)
    return services


@pytest.fixture
def test_app(services):
    return create_app(services=services)


@pytest.fixture
async def client(test_app):
    """Create async test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
