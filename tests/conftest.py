"""Shared test fixtures for the postcorpus test suite.

All tests run against an in-memory SQLite database shared through a
StaticPool. Tables are created before and dropped after every test, so each
test starts empty.
"""

import os

# Force auth off and use an in-memory database before any app imports.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTH_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from postcorpus.core.auth import get_clock
from postcorpus.core.config import settings
from postcorpus.core.token_factory import create_owner_token
from postcorpus.database import Base, SessionLocal, engine, get_db
from postcorpus.main import app
from postcorpus.schemas.post import PostCreate

# Wednesday noon, UTC. Tests move relative to it.
T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FixedClock:
    """A clock tests can set and advance explicitly."""

    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def _clean_tables():
    """Fresh schema per test."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture()
def clock():
    return FixedClock()


@pytest.fixture()
def client(db, clock):
    """FastAPI TestClient with the DB and clock dependencies overridden."""

    def _override_get_db():
        try:
            yield db
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def auth_enabled(monkeypatch):
    """Turn on bearer-token identity for one test."""
    monkeypatch.setattr(settings, "auth_enabled", True)


def auth_headers(owner_id: str) -> dict:
    token = create_owner_token(owner_id, settings.jwt_secret_key)
    return {"Authorization": f"Bearer {token}"}


def make_post(
    slug: str = "hello-world",
    title: str = "Hello World",
    content: str = "# Hello\n\nFirst post.",
    **overrides,
) -> dict:
    """Factory for post creation payloads."""
    payload = {
        "slug": slug,
        "title": title,
        "content": content,
        "format": "md",
        "tags": [],
    }
    payload.update(overrides)
    return payload


def make_create(slug: str = "hello-world", **overrides) -> PostCreate:
    return PostCreate(**make_post(slug=slug, **overrides))
