"""Tests for application wiring."""

import sqlite3

import pytest

from memos_core.config import settings
from memos_core.db import init_db
from memos_core.exceptions import DatabaseError
from memos_core.main import app


def test_blueprints_registered():
    assert "auth" in app.blueprints
    assert "api_v1" in app.blueprints


def test_v1_routes_use_configured_prefix():
    rules = {rule.rule for rule in app.url_map.iter_rules()}
    assert f"{settings.api_v1_prefix}/memos" in rules
    assert f"{settings.api_v1_prefix}/inbox" in rules
    assert "/auth/login" in rules


def test_cors_headers(client):
    response = client.get("/health", headers={"Origin": settings.cors_origins[0]})
    assert response.headers.get("Access-Control-Allow-Origin") == settings.cors_origins[0]


def test_unknown_route_is_404(client):
    assert client.get("/nope").status_code == 404


def test_init_db_wraps_sqlite_errors(tmp_path):
    """A file that is not a database surfaces as DatabaseError."""
    bad = tmp_path / "not-a-db.db"
    bad.write_bytes(b"this is not sqlite" * 100)

    original = settings.database_path
    settings.database_path = str(bad)
    try:
        with pytest.raises(DatabaseError):
            init_db()
    finally:
        settings.database_path = original


def test_schema_applied_on_startup():
    conn = sqlite3.connect(settings.database_path)
    try:
        row = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='memo'"
        ).fetchone()
    finally:
        conn.close()
    assert row is not None
