"""Shared fixtures: in-memory SQLite tables and an app client wired to them."""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from database import build_session_factory
from models import Book, User, UserSetting
from services.table_service import SqlTable, Table, TableError


class FailingTable(Table):
    """A store that is down: every call raises TableError."""

    name = "books"

    def __init__(self):
        self.calls = []

    def _fail(self, op):
        self.calls.append(op)
        raise TableError(f"{op} failed: store unavailable")

    def select(self, filters=None, order_by=None, descending=False):
        return self._fail("select")

    def insert(self, data):
        return self._fail("insert")

    def update(self, row_id, data, filters=None):
        return self._fail("update")

    def delete(self, row_id, filters=None):
        return self._fail("delete")


@pytest.fixture
def session_factory():
    return build_session_factory("sqlite://")


@pytest.fixture
def books_table(session_factory):
    return SqlTable(Book, session_factory)


@pytest.fixture
def users_table(session_factory):
    return SqlTable(User, session_factory)


@pytest.fixture
def settings_table(session_factory):
    return SqlTable(UserSetting, session_factory)


@pytest.fixture
def failing_table():
    return FailingTable()


@pytest.fixture
def client(books_table, users_table, settings_table):
    import main
    from dependencies import get_identity, get_preferences, get_sessions
    from services.collection_service import SessionRegistry
    from services.identity_service import LocalIdentity
    from services.preference_service import PreferenceService

    identity = LocalIdentity(users_table)
    sessions = SessionRegistry(books_table)
    preferences = PreferenceService(settings_table)
    main.app.dependency_overrides[get_identity] = lambda: identity
    main.app.dependency_overrides[get_sessions] = lambda: sessions
    main.app.dependency_overrides[get_preferences] = lambda: preferences
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()


@pytest.fixture
def signup(client):
    """Register a user through the API and return its Authorization header."""

    def _signup(email: str = "reader@example.com", password: str = "secret123") -> dict:
        resp = client.post("/api/v1/auth/signup", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['data']['token']}"}

    return _signup
