"""
tests/conftest.py -- Shared fixtures for the EasyLaptop test suite.

The environment is set before any easylaptop import so the cached
get_settings() sees an in-memory SQLite database, a throwaway media
directory, and a low bcrypt cost (4 is the minimum bcrypt accepts).

Every test gets fresh tables: the autouse `database` fixture creates the
schema before the test and drops it afterwards.
"""

from __future__ import annotations

import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key-0123456789abcdef0123456789")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="easylaptop-media-"))

import pytest
from fastapi.testclient import TestClient

from easylaptop.core.config import get_settings
from easylaptop.core.database import Base, SessionLocal, engine
from easylaptop.main import app


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def settings():
    return get_settings()


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def _bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_header():
    """Return a function building the Authorization header for a token."""
    return _bearer


@pytest.fixture
def register_user(client):
    """Register through the API and return (token, user_json).

    Usage:
        token, user = register_user("ana@example.com", college="MIT")
    """

    def _register(email: str, name: str = "Test Student", password: str = "password123", **extra):
        payload = {"name": name, "email": email, "password": password, **extra}
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return body["token"], body["user"]

    return _register


@pytest.fixture
def create_listing(client):
    """Create a listing through the API and return the listing JSON."""

    def _create(token: str, files=None, **overrides):
        data = {
            "title": "Dell Inspiron 15",
            "description": "Good battery life, fine for coding.",
            "price": "350",
            "brand": "Dell",
            "condition": "Good",
        }
        data.update(overrides)
        resp = client.post("/api/laptops", data=data, files=files, headers=_bearer(token))
        assert resp.status_code == 201, resp.text
        return resp.json()["laptop"]

    return _create
