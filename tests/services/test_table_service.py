"""SqlTable row mapping and SupabaseTable error wrapping."""
from __future__ import annotations

from datetime import datetime

import httpx
import pytest

from services import table_service
from services.table_service import SupabaseTable, TableError


def test_sql_insert_assigns_id_and_timestamps(books_table):
    row = books_table.insert({"user_id": "u1", "title": "Dune", "start_date": "2024-01-01"})
    assert len(row["id"]) == 36
    assert row["start_date"] == "2024-01-01"
    assert row["finish_date"] is None
    assert row["created_at"].endswith("+00:00")


def test_sql_select_filters_and_orders(books_table):
    books_table.insert({"user_id": "u1", "title": "A"})
    books_table.insert({"user_id": "u2", "title": "B"})
    books_table.insert({"user_id": "u1", "title": "C"})

    rows = books_table.select(filters={"user_id": "u1"}, order_by="created_at", descending=True)
    assert [r["title"] for r in rows] == ["C", "A"]


def test_sql_update_scoped_by_filters(books_table):
    row = books_table.insert({"user_id": "u1", "title": "Dune"})
    assert books_table.update(row["id"], {"title": "X"}, filters={"user_id": "u2"}) is None
    updated = books_table.update(row["id"], {"rating": 4}, filters={"user_id": "u1"})
    assert updated["rating"] == 4
    assert updated["title"] == "Dune"


def test_sql_update_never_moves_updated_at_backwards(books_table):
    row = books_table.insert({"user_id": "u1", "title": "Dune"})
    stale = "2000-01-01T00:00:00+00:00"
    updated = books_table.update(row["id"], {"notes": "x", "updated_at": stale})
    assert datetime.fromisoformat(updated["updated_at"]) > datetime.fromisoformat(row["updated_at"])


def test_sql_delete_reports_whether_a_row_went_away(books_table):
    row = books_table.insert({"user_id": "u1", "title": "Dune"})
    assert books_table.delete(row["id"], filters={"user_id": "u2"}) is False
    assert books_table.delete(row["id"], filters={"user_id": "u1"}) is True
    assert books_table.select() == []


def test_sql_rejects_unknown_columns_and_bad_dates(books_table):
    with pytest.raises(TableError):
        books_table.insert({"user_id": "u1", "title": "Dune", "isbn": "123"})
    with pytest.raises(TableError):
        books_table.insert({"user_id": "u1", "title": "Dune", "start_date": "yesterday"})


def test_sql_constraint_violation_becomes_table_error(books_table):
    with pytest.raises(TableError):
        books_table.insert({"user_id": "u1"})


def test_supabase_table_passes_order_and_filters(monkeypatch):
    calls = []

    def fake_select(table, filters=None, columns="*", order=None):
        calls.append((table, filters, order))
        return [{"id": "1"}]

    monkeypatch.setattr(table_service, "sb_select", fake_select)
    rows = SupabaseTable("books").select(filters={"user_id": "u1"}, order_by="created_at", descending=True)
    assert rows == [{"id": "1"}]
    assert calls == [("books", {"user_id": "u1"}, "created_at.desc")]


def test_supabase_table_maps_empty_update_to_none(monkeypatch):
    monkeypatch.setattr(table_service, "sb_update", lambda *a, **k: {})
    assert SupabaseTable("books").update("1", {"title": "x"}) is None


def test_supabase_table_wraps_http_errors(monkeypatch):
    request = httpx.Request("GET", "https://demo.supabase.co/rest/v1/books")

    def boom(*_a, **_k):
        raise httpx.ConnectError("connection refused", request=request)

    for name in ("sb_select", "sb_insert", "sb_update", "sb_delete"):
        monkeypatch.setattr(table_service, name, boom)

    table = SupabaseTable("books")
    with pytest.raises(TableError, match="select from books failed"):
        table.select()
    with pytest.raises(TableError):
        table.insert({"title": "Dune"})
    with pytest.raises(TableError):
        table.update("1", {"title": "Dune"})
    with pytest.raises(TableError):
        table.delete("1")
