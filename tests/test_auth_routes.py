import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import portal.services.auth as auth_service
from portal.db.session import AsyncSessionLocal, get_db
from portal.main import app
from portal.models.user import User


COOKIE = "portal_session"


def test_landing_redirects_to_login(client):
    r = client.get("/")
    assert r.status_code == 303
    assert r.headers["location"] == "/login"


def test_login_and_register_pages_are_public(client):
    assert client.get("/login").status_code == 200
    assert client.get("/register").status_code == 200
    assert client.get("/health").json() == {"status": "ok"}


def test_register_redirects_to_login(client, register, count_users):
    r = register("alice", "pw1")
    assert r.status_code == 303
    assert r.headers["location"] == "/login"
    assert count_users("alice") == 1


def test_register_stores_hash_not_plaintext(client, register):
    register("alice", "pw1")

    async def _stored():
        async with AsyncSessionLocal() as db:
            return (await db.get(User, "alice")).password_hash

    stored = client.portal.call(_stored)
    assert stored != "pw1"
    assert stored.startswith("$2b$10$")


def test_register_does_not_log_in(client, register, store):
    register("alice", "pw1")
    assert len(store) == 0
    assert COOKIE not in client.cookies


def test_duplicate_registration_keeps_one_row(client, register, login, count_users):
    register("alice", "pw1")
    r = register("alice", "attacker")
    assert r.status_code == 303
    assert r.headers["location"] == "/register?error=taken"
    assert count_users("alice") == 1

    r = login("alice", "attacker")
    assert r.status_code == 200
    assert "Incorrect username or password." in r.text

    assert login("alice", "pw1").headers["location"] == "/discover"


def test_register_with_missing_fields_stays_on_register(client, count_users):
    r = client.post("/register", data={"username": "alice"})
    assert r.status_code == 303
    assert r.headers["location"] == "/register?error=invalid"

    r = client.post("/register", data={"username": "   ", "password": "pw1"})
    assert r.headers["location"] == "/register?error=invalid"
    assert count_users() == 0


def test_register_page_shows_error_message(client):
    r = client.get("/register", params={"error": "taken"})
    assert "That username is already registered." in r.text

    r = client.get("/register", params={"error": "bogus"})
    assert r.status_code == 200
    assert "alert-error" not in r.text


def test_register_store_failure_redirects_back(client, monkeypatch):
    async def broken(db, username, password_hash):
        raise OperationalError("INSERT", {}, Exception("db down"))

    monkeypatch.setattr(auth_service, "create_user", broken)
    r = client.post("/register", data={"username": "alice", "password": "pw1"})
    assert r.status_code == 303
    assert r.headers["location"] == "/register?error=failed"


def test_login_success_creates_session(client, register, login, store):
    register("alice", "pw1")
    assert len(store) == 0
    assert COOKIE not in client.cookies

    r = login("alice", "pw1")
    assert r.status_code == 303
    assert r.headers["location"] == "/discover"
    assert len(store) == 1
    assert COOKIE in client.cookies


def test_login_accepts_json_body(client, register, store):
    register("alice", "pw1")
    r = client.post("/login", json={"username": "alice", "password": "pw1"})
    assert r.status_code == 303
    assert r.headers["location"] == "/discover"
    assert len(store) == 1


def test_login_wrong_password(client, register, login, store):
    register("alice", "pw1")
    r = login("alice", "wrong")
    assert r.status_code == 200
    assert "Incorrect username or password." in r.text
    assert "alert-error" in r.text
    assert len(store) == 0


def test_login_unknown_user(client, login):
    r = login("bob", "x")
    assert r.status_code == 200
    assert "Username not found. Please register." in r.text
    assert "alert-error" in r.text


def test_login_missing_fields(client):
    r = client.post("/login", data={"username": "alice"})
    assert r.status_code == 200
    assert "Please enter a username and password." in r.text

    r = client.post("/login", content=b"not json", headers={"content-type": "application/json"})
    assert r.status_code == 200
    assert "Please enter a username and password." in r.text


def test_login_store_failure_renders_generic_message(client, login, monkeypatch):
    async def broken(db, username):
        raise OperationalError("SELECT", {}, Exception("secret connection detail"))

    monkeypatch.setattr(auth_service, "get_user", broken)
    r = login("alice", "pw1")
    assert r.status_code == 200
    assert "An error occurred during login. Please try again." in r.text
    assert "secret connection detail" not in r.text


def test_login_with_corrupt_stored_hash(client, login, monkeypatch):
    async def corrupt(db, username):
        return User(username=username, password_hash="plaintext")

    monkeypatch.setattr(auth_service, "get_user", corrupt)
    r = login("alice", "plaintext")
    assert r.status_code == 200
    assert "An error occurred during login. Please try again." in r.text


def test_relogin_replaces_previous_session(client, register, login, store):
    register("alice", "pw1")
    login("alice", "pw1")
    first = client.cookies[COOKIE]
    login("alice", "pw1")
    assert client.cookies[COOKIE] != first
    assert len(store) == 1


@pytest.fixture()
def unreachable_db(client):
    """Route requests to a Postgres URL nobody listens on."""
    pytest.importorskip("asyncpg")
    engine = create_async_engine("postgresql+asyncpg://u:p@127.0.0.1:1/x")
    sessions = async_sessionmaker(engine, expire_on_commit=False)

    async def _get_db():
        async with sessions() as db:
            yield db

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)
    client.portal.call(engine.dispose)


def test_login_with_unreachable_database(client, login, unreachable_db):
    r = login("alice", "pw1")
    assert r.status_code == 200
    assert "An error occurred during login. Please try again." in r.text
    assert "Connect call failed" not in r.text


def test_register_with_unreachable_database(client, register, unreachable_db):
    r = register("alice", "pw1")
    assert r.status_code == 303
    assert r.headers["location"] == "/register?error=failed"


def test_refused_connection_is_a_store_failure(client, login, register, monkeypatch):
    async def refused(*args):
        raise ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 5432)")

    monkeypatch.setattr(auth_service, "get_user", refused)
    monkeypatch.setattr(auth_service, "create_user", refused)

    r = login("alice", "pw1")
    assert r.status_code == 200
    assert "An error occurred during login. Please try again." in r.text

    r = register("alice", "pw1")
    assert r.status_code == 303
    assert r.headers["location"] == "/register?error=failed"
