"""
User Resource Service Tests - Test Configuration.

Provides pytest fixtures for building isolated applications, each with its
own empty user store.
"""

from typing import Any, Dict, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from user_resource.config import Settings
from user_resource.main import create_app
from user_resource.store import UserStore


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults, independent of the host environment."""
    return Settings(_env_file=None)


@pytest.fixture
def store() -> UserStore:
    """Fresh, empty user store."""
    return UserStore()


@pytest.fixture
def app(test_settings: Settings, store: UserStore) -> FastAPI:
    """Application serving the store fixture."""
    return create_app(test_settings, store=store)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client running the application lifespan."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def melissa() -> Dict[str, Any]:
    """Sample user record."""
    return {"id": "1", "name": "Melissa", "age": 30}


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "asyncio: mark test as async",
    )
