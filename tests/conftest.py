"""Pytest configuration and shared fixtures."""

import uuid

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from notehub.auth import create_access_token
from notehub.database import Transaction, get_transaction


@pytest.fixture
def mock_db():
    """Fresh in-memory MongoDB database per test."""
    client = AsyncMongoMockClient()
    return client[f"notehub_test_{uuid.uuid4().hex[:8]}"]


@pytest.fixture
def tx(mock_db):
    """Transaction handle over the in-memory store (no driver session)."""
    return Transaction(db=mock_db)


@pytest.fixture
def make_user(mock_db):
    """Factory inserting a user record and returning its id as a string."""

    async def _make_user(name: str = "Test User", email: str | None = None) -> str:
        email = email or f"test-{uuid.uuid4().hex[:8]}@example.com"
        result = await mock_db.users.insert_one({"name": name, "email": email})
        return str(result.inserted_id)

    return _make_user


@pytest.fixture
async def alice(make_user):
    return await make_user("Alice", "alice@example.com")


@pytest.fixture
async def bob(make_user):
    return await make_user("Bob", "bob@example.com")


@pytest.fixture
async def carol(make_user):
    return await make_user("Carol", "carol@example.com")


@pytest.fixture
def api_client(mock_db):
    """FastAPI test client whose requests run against the in-memory store."""
    from notehub.app import app

    async def _override_transaction():
        yield Transaction(db=mock_db)

    app.dependency_overrides[get_transaction] = _override_transaction
    # No lifespan: the in-memory store replaces Database.connect()
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build bearer headers for a user id."""

    def _headers(user_id: str) -> dict:
        token = create_access_token(user_id=user_id, email=f"{user_id}@example.com")
        return {"Authorization": f"Bearer {token}"}

    return _headers
