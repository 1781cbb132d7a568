"""
Pytest configuration and fixtures

Tests run against a throwaway SQLite database. The schema is dropped and
recreated around every test, so nothing leaks between tests.
"""
import os
import tempfile

# Must be set before anything under app/ is imported
_db_dir = tempfile.mkdtemp(prefix="race-results-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["ENV"] = "test"
os.environ["LOG_FILE"] = ""
os.environ.setdefault("LOG_LEVEL", "WARNING")

from types import SimpleNamespace
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.db import AsyncSessionLocal, Base, SessionLocal, engine
from app.models import User
from app.services.firebase import TokenData
from app.services.firebase import firebase_auth


@pytest.fixture(autouse=True)
def _fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


def create_user(uid: str | None = None, status: str = "none", **extra) -> int:
    """Insert an account synchronously and return its id."""
    uid = uid or f"uid_{uuid4().hex[:8]}"
    with SessionLocal() as session:
        user = User(
            firebase_uid=uid,
            email=f"{uid}@example.com",
            name=uid.title(),
            subscription_status=status,
            **extra,
        )
        session.add(user)
        session.commit()
        return user.id


def load_user_sync(user_id: int) -> User:
    with SessionLocal() as session:
        return session.get(User, user_id)


@pytest_asyncio.fixture
async def db():
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def free_user(db):
    return await db.get(User, create_user("free_runner", status="none"))


@pytest_asyncio.fixture
async def pro_user(db):
    return await db.get(User, create_user("pro_runner", status="active"))


@pytest.fixture
def fake_auth(monkeypatch):
    """Treat the bearer token as the Firebase uid."""

    async def _verify(id_token: str) -> TokenData:
        return TokenData(uid=id_token, email=f"{id_token}@example.com", name=id_token.title())

    monkeypatch.setattr(firebase_auth, "verify_token_async", _verify)
    return _verify


@pytest.fixture
def client(fake_auth):
    from main import app

    return TestClient(app, raise_server_exceptions=False)


def auth_headers(uid: str) -> dict:
    return {"Authorization": f"Bearer {uid}"}


def stripe_object(**fields):
    """Attribute-style stand-in for a StripeObject."""
    return SimpleNamespace(**fields)
