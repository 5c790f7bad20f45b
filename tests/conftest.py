"""Pytest configuration and fixtures."""

import pytest
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient

from config import Config
from shortlink.database.memory import MemoryLinkStore
from shortlink.service import ShortLinkService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from web_app import create_app


class FakeCache:
    """Dict-backed stand-in for RedisCache."""

    def __init__(self):
        self.data = {}
        self.enabled = True
        self.deleted = []

    async def get(self, short_code):
        return self.data.get(short_code)

    async def set(self, short_code, original_url, ttl=None):
        self.data[short_code] = original_url
        return True

    async def delete(self, short_code):
        self.deleted.append(short_code)
        return self.data.pop(short_code, None) is not None

    async def ping(self):
        return True

    async def close(self):
        pass


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
async def test_store(logger) -> AsyncGenerator[MemoryLinkStore, None]:
    """Create an in-memory store."""
    store = MemoryLinkStore(db_config="memory://", logger=logger)

    yield store

    await store.close()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def service(test_store, short_code_generator, logger) -> ShortLinkService:
    """Create service instance."""
    return ShortLinkService(
        store=test_store,
        cache=None,
        short_code_generator=short_code_generator,
        logger=logger,
    )


@pytest.fixture
def config():
    return Config(
        database_url="memory://",
        base_url="http://testserver",
    )


@pytest.fixture
def app(test_store, service, config):
    """Create test FastAPI app."""
    return create_app(
        store_instance=test_store,
        cache_instance=None,
        service_instance=service,
        config=config,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
