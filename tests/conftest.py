"""
Pytest configuration and fixtures for the store rating API tests.
"""

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from storerating.config import Settings
from storerating.main import create_app
from storerating.models.user import UserRole
from storerating.users.service import create_user


ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "Admin@123"
DEFAULT_PASSWORD = "Secret#1"


# =============================================================================
# Settings / Application
# =============================================================================

def get_test_settings() -> Settings:
    """Return settings configured for testing."""
    return Settings(
        app_env="test",
        secret_key="test-secret-key",
        database_url="sqlite://",
        bcrypt_rounds=4,
        log_level="WARNING",
        admin_name="Test Admin",
        admin_email=ADMIN_EMAIL,
        admin_password=ADMIN_PASSWORD,
    )


@pytest.fixture
def settings() -> Settings:
    return get_test_settings()


@pytest.fixture
def app(settings):
    """Fresh application with its own in-memory database."""
    return create_app(settings)


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """HTTP client; entering the context runs startup (tables + admin)."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client):
    """Session bound to the same database the client talks to."""
    session = client.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# Helpers
# =============================================================================

def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def admin_token(client) -> str:
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)


@pytest.fixture
def make_user(db):
    """Create a user directly through the repository and return it."""
    def _make(email: str, role: UserRole = UserRole.USER, name: str = "Test User"):
        return create_user(db, name, email, DEFAULT_PASSWORD, address="1 Main St", role=role)
    return _make


@pytest.fixture
def owner_token(client, make_user) -> str:
    make_user("owner@example.com", UserRole.STORE_OWNER, name="Store Owner")
    return login(client, "owner@example.com")


@pytest.fixture
def user_token(client, make_user) -> str:
    make_user("user@example.com", UserRole.USER, name="Normal User")
    return login(client, "user@example.com")


@pytest.fixture
def make_store(client):
    """Create a store over HTTP as the given caller and return its JSON."""
    def _make(token: str, email: str, name: str = "Corner Shop", address: str = "2 High St") -> dict:
        response = client.post(
            "/api/stores",
            json={"name": name, "email": email, "address": address},
            headers=auth_header(token),
        )
        assert response.status_code == 201, response.text
        return response.json()["store"]
    return _make
