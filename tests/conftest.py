import os
import tempfile
from pathlib import Path

# Settings are read once at import time; point them at a throwaway database first.
_DB_DIR = Path(tempfile.mkdtemp(prefix="portal-tests-"))
DB_PATH = _DB_DIR / "test.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["SESSION_COOKIE_NAME"] = "portal_session"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from portal.db.session import AsyncSessionLocal
from portal.main import app
from portal.models.user import User
from portal.sessions.store import InMemorySessionStore

COOKIE = "portal_session"


@pytest.fixture()
def store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def client(store):
    """Fresh database file and session store per test; lifespan creates the table."""
    DB_PATH.unlink(missing_ok=True)
    app.state.session_store = store
    with TestClient(app, follow_redirects=False) as c:
        yield c


@pytest.fixture()
def count_users(client):
    async def _count(username=None):
        stmt = select(func.count()).select_from(User)
        if username is not None:
            stmt = stmt.where(User.username == username)
        async with AsyncSessionLocal() as db:
            return (await db.execute(stmt)).scalar_one()

    return lambda username=None: client.portal.call(_count, username)


@pytest.fixture()
def register(client):
    def _register(username, password):
        return client.post("/register", data={"username": username, "password": password})

    return _register


@pytest.fixture()
def login(client):
    def _login(username, password):
        return client.post("/login", data={"username": username, "password": password})

    return _login
