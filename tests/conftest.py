"""Shared test fixtures for memos-core."""

import os
import sqlite3
import tempfile

# Configure before memos_core reads its settings
_TEST_DIR = tempfile.mkdtemp(prefix="memos-core-tests-")
os.environ.setdefault("DATABASE_PATH", os.path.join(_TEST_DIR, "memos.db"))
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")

import pytest

from memos_core.access import Identity
from memos_core.auth import schemas, service
from memos_core.config import settings
from memos_core.db import Core, apply_schema
from memos_core.main import app
from memos_core.schema.types import Role


@pytest.fixture
def test_db():
    """Create in-memory test database with schema."""
    db = sqlite3.connect(":memory:")
    db.row_factory = sqlite3.Row
    db.execute("PRAGMA foreign_keys = ON")
    apply_schema(db)

    yield db

    db.close()


@pytest.fixture
def make_user(test_db):
    """Factory creating a user row and returning its Identity."""

    def _make(username: str, role: Role = Role.USER) -> Identity:
        data = schemas.UserCreate(username=username, password="TestPass123")
        user = service.create_user(test_db, data, role=role)
        test_db.commit()
        return Identity(user.id, Role(user.role))

    return _make


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def host(make_user):
    return make_user("host", role=Role.HOST)


@pytest.fixture
def core_as(test_db):
    """Factory returning a non-atomic Core on the test database for an identity."""

    def _core(identity: Identity | None) -> Core:
        return Core(test_db, identity=identity)

    return _core


@pytest.fixture
def client():
    """Create test client backed by a fresh temp-file database."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    original_db_path = settings.database_path
    try:
        settings.database_path = db_path

        from memos_core.db import init_db
        init_db()

        app.config['TESTING'] = True
        with app.test_client() as client:
            yield client

    finally:
        settings.database_path = original_db_path
        try:
            os.unlink(db_path)
        except OSError:
            pass


def _signup(client, username: str) -> dict:
    response = client.post(
        "/auth/signup",
        json={"username": username, "password": "SecurePass123"}
    )
    assert response.status_code == 201, response.get_json()
    data = response.get_json()
    return {
        "id": data["user"]["id"],
        "role": data["user"]["role"],
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
    }


@pytest.fixture
def signup(client):
    """Factory signing up a user through the API.

    Returns a dict with the user's id, role and auth headers. The first
    account created in a test becomes HOST.
    """

    def _signup_user(username: str) -> dict:
        return _signup(client, username)

    return _signup_user
