"""
Checkstate: Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the test suite.
How:   Every test gets its own temporary storage root; the API client talks
       to a fresh app built from Settings pointing at that root.

Fixture Hierarchy (all function-scoped):
    ├── data_dir:     temporary storage root (not created yet)
    ├── settings:     Settings bound to data_dir
    ├── store:        CheckStore over data_dir
    └── test_client:  HTTPX AsyncClient for a fresh app
"""

import os

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Keep test output quiet and stop the module-level app from using ./data
os.environ["CHECKSTATE_LOG_LEVEL"] = "WARNING"

from checkstate.config import Settings  # noqa: E402
from checkstate.services.state_store import CheckStore  # noqa: E402


@pytest.fixture
def data_dir(tmp_path):
    """
    Path of the storage root for one test.

    Deliberately not created: the store must cope with a root that does
    not exist yet, as on a first start.
    """
    return str(tmp_path / "data")


@pytest.fixture
def settings(data_dir):
    return Settings(data_dir=data_dir, log_level="WARNING")


@pytest.fixture
def store(data_dir):
    return CheckStore(data_dir)


@pytest_asyncio.fixture
async def test_client(settings):
    """
    Async HTTP client wired to a freshly created app.

    Usage:
        async def test_states(test_client):
            response = await test_client.get("/api/states?md_id=doc1")
            assert response.status_code == 200
    """
    from checkstate.main import create_app

    app = create_app(settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
