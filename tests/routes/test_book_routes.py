"""Book endpoints end to end, over the local SQL store."""
from __future__ import annotations


def _create(client, headers, **fields):
    resp = client.post("/api/v1/books", json=fields, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def _titles(payload):
    return [b["title"] for b in payload["data"]["books"]]


def test_books_require_a_token(client):
    resp = client.get("/api/v1/books")
    assert resp.status_code == 401
    assert resp.headers["WWW-Authenticate"] == "Bearer"


def test_empty_list_on_first_visit(client, signup):
    headers = signup()
    resp = client.get("/api/v1/books", headers=headers)
    data = resp.json()["data"]
    assert data["books"] == []
    assert data["counts"]["All"] == 0
    assert data["loaded"] is True
    assert data["view_mode"] == "grid"


def test_create_round_trip_carries_owner(client, signup):
    headers = signup()
    me = client.get("/api/v1/auth/me", headers=headers).json()["data"]

    body = _create(client, headers, title="Dune", author="Frank Herbert")
    assert body["status"] == "success"
    dune = body["data"]["books"][0]
    assert dune["title"] == "Dune"
    assert dune["user_id"] == me["id"]
    assert dune["status"] == "To-Read"


def test_create_derives_status_from_dates(client, signup):
    headers = signup()
    body = _create(client, headers, title="Dune", status="Did Not Finish", finish_date="2024-01-05")
    assert body["data"]["books"][0]["status"] == "Finished"
    body = _create(client, headers, title="Emma", status="To-Read", start_date="2024-01-01")
    emma = next(b for b in body["data"]["books"] if b["title"] == "Emma")
    assert emma["status"] == "Currently Reading"


def test_title_is_required(client, signup):
    headers = signup()
    assert client.post("/api/v1/books", json={"author": "Nobody"}, headers=headers).status_code == 422
    assert client.post("/api/v1/books", json={"title": ""}, headers=headers).status_code == 422
    resp = client.post("/api/v1/books", json={"title": "   "}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Title is required"


def test_invalid_status_and_rating(client, signup):
    headers = signup()
    resp = client.post("/api/v1/books", json={"title": "Dune", "status": "Lost"}, headers=headers)
    assert resp.status_code == 400
    resp = client.post("/api/v1/books", json={"title": "Dune", "rating": 9}, headers=headers)
    assert resp.status_code == 422


def test_update_is_partial_and_keeps_identity(client, signup):
    headers = signup()
    dune = _create(client, headers, title="Dune", notes="Spice")["data"]["books"][0]

    resp = client.put(f"/api/v1/books/{dune['id']}", json={"rating": 5}, headers=headers)
    updated = resp.json()["data"]["books"][0]
    assert resp.json()["status"] == "success"
    assert updated["rating"] == 5
    assert updated["notes"] == "Spice"
    assert updated["id"] == dune["id"]
    assert updated["created_at"] == dune["created_at"]
    assert updated["updated_at"] != dune["updated_at"]


def test_update_unknown_book_reports_error(client, signup):
    headers = signup()
    resp = client.put("/api/v1/books/missing", json={"rating": 5}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "error"
    assert "not found" in resp.json()["message"]


def test_delete_needs_confirmation(client, signup):
    headers = signup()
    dune = _create(client, headers, title="Dune")["data"]["books"][0]

    resp = client.delete(f"/api/v1/books/{dune['id']}", headers=headers)
    assert resp.json()["status"] == "cancelled"
    assert _titles(resp.json()) == ["Dune"]

    resp = client.delete(f"/api/v1/books/{dune['id']}?confirm=true", headers=headers)
    assert resp.json()["status"] == "success"
    assert resp.json()["data"]["books"] == []
    assert resp.json()["data"]["counts"]["All"] == 0


def test_users_cannot_touch_each_others_books(client, signup):
    alice = signup("alice@example.com")
    bob = signup("bob@example.com")
    dune = _create(client, alice, title="Dune")["data"]["books"][0]

    assert client.get("/api/v1/books", headers=bob).json()["data"]["books"] == []
    resp = client.delete(f"/api/v1/books/{dune['id']}?confirm=true", headers=bob)
    assert resp.json()["status"] == "error"
    assert _titles(client.post("/api/v1/books/refresh", headers=alice).json()) == ["Dune"]


def test_filter_sort_and_counts(client, signup):
    headers = signup()
    _create(client, headers, title="Zeus", finish_date="2024-02-01")
    _create(client, headers, title="apple")
    _create(client, headers, title="Middlemarch", start_date="2024-03-01")

    assert _titles(client.get("/api/v1/books", headers=headers).json()) == ["apple", "Middlemarch", "Zeus"]

    resp = client.post("/api/v1/books/view/sort", json={"field": "title"}, headers=headers)
    assert _titles(resp.json()) == ["Zeus", "Middlemarch", "apple"]
    assert resp.json()["data"]["sort_direction"] == "desc"

    resp = client.post("/api/v1/books/view/sort", json={"field": "finish_date"}, headers=headers)
    assert resp.json()["data"]["sort_direction"] == "asc"
    assert _titles(resp.json())[-1] == "Zeus"

    resp = client.put("/api/v1/books/view/filter", json={"status": "Finished"}, headers=headers)
    assert _titles(resp.json()) == ["Zeus"]
    assert resp.json()["data"]["counts"] == {
        "All": 3,
        "To-Read": 1,
        "Currently Reading": 1,
        "Finished": 1,
        "Did Not Finish": 0,
    }

    counts = client.get("/api/v1/books/counts", headers=headers).json()["data"]
    assert counts["All"] == 3


def test_view_choices_are_validated(client, signup):
    headers = signup()
    assert client.put("/api/v1/books/view/filter", json={"status": "Lost"}, headers=headers).status_code == 400
    assert client.post("/api/v1/books/view/sort", json={"field": "notes"}, headers=headers).status_code == 400
    assert client.put("/api/v1/books/view/mode", json={"mode": "shelf"}, headers=headers).status_code == 400

    resp = client.put("/api/v1/books/view/mode", json={"mode": "list"}, headers=headers)
    assert resp.json()["data"]["view_mode"] == "list"


def test_listing_reloads_books_written_elsewhere(client, signup, books_table):
    headers = signup()
    me = client.get("/api/v1/auth/me", headers=headers).json()["data"]
    assert client.get("/api/v1/books", headers=headers).json()["data"]["books"] == []

    books_table.insert({"user_id": me["id"], "title": "Dune", "status": "Did Not Finish"})
    resp = client.get("/api/v1/books", headers=headers)
    assert _titles(resp.json()) == ["Dune"]


def test_null_status_in_update_changes_nothing(client, signup):
    headers = signup()
    dune = _create(client, headers, title="Dune", status="Did Not Finish")["data"]["books"][0]
    resp = client.put(f"/api/v1/books/{dune['id']}", json={"status": None, "rating": 3}, headers=headers)
    updated = resp.json()["data"]["books"][0]
    assert updated["status"] == "Did Not Finish"
    assert updated["rating"] == 3
