"""
Pytest fixtures for Stratagem tests.
"""

import pytest
from fastapi.testclient import TestClient

from ..api.app import create_app
from ..config import Settings
from ..services.registry import ServiceRegistry, build_mock_registry

USER1_TOKEN = "dev-token"
USER2_TOKEN = "tok-user2"


@pytest.fixture
def settings() -> Settings:
    """Settings with a second token bound to user2."""
    return Settings(
        api_token=USER1_TOKEN,
        extra_tokens={USER2_TOKEN: "user2"},
        default_user_id="user1",
        base_url="http://testserver/v1",
    )


@pytest.fixture
def registry() -> ServiceRegistry:
    """Fresh mock services for every test."""
    return build_mock_registry()


@pytest.fixture
def app(settings, registry):
    return create_app(settings=settings, registry=registry)


@pytest.fixture
def services(app):
    """The ServiceContext the app resolved at startup."""
    return app.state.services


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def user1_headers() -> dict:
    return {"Authorization": f"Bearer {USER1_TOKEN}"}


@pytest.fixture
def user2_headers() -> dict:
    return {"Authorization": f"Bearer {USER2_TOKEN}"}
