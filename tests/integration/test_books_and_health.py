from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from backend.app_setup.factory import create_app
from backend.infra.supabase_client import Database, get_db


def test_root_and_security_headers(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "bookstore" in r.text
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert client.get("/favicon.ico").status_code == 204


def test_list_and_get_books(client, seeded_db):
    seeded_db.rows("books").append({"id": "B2", "title": "Draft", "price": "5.00", "status": "draft"})
    assert [b["id"] for b in client.get("/books").json()] == ["B1"]
    assert client.get("/books/B1").json()["title"] == "Dune"
    r = client.get("/books/B404")
    assert r.status_code == 404
    assert r.json()["code"] == "book_not_found"


def test_books_limit_returns_latest_six(client, seeded_db):
    for i in range(8):
        seeded_db.rows("books").append({
            "id": f"N{i}", "title": f"T{i}", "price": "1.00", "status": "published",
            "created_at": f"2026-10-0{i + 1}T00:00:00+00:00",
        })
    ids = [b["id"] for b in client.get("/books-limit").json()]
    assert ids == ["N7", "N6", "N5", "N4", "N3", "N2"]


def test_create_book_requires_staff(client, act_as, users, seeded_db):
    body = {"title": " Neuromancer ", "price": "12.5", "quantity": 3}
    assert client.post("/books", json=body).status_code == 403

    act_as(users["librarian"])
    r = client.post("/books", json=body)
    assert r.status_code == 200
    book = r.json()
    assert book["title"] == "Neuromancer"
    assert book["price"] == "12.50"
    assert book["librarian_email"] == "lib@x.com"
    assert book["status"] == "published"


def test_create_book_rejects_bad_price(client, act_as, users):
    act_as(users["admin"])
    assert client.post("/books", json={"title": "X", "price": "free"}).status_code == 400
    assert client.post("/books", json={"title": "X", "price": "-1"}).status_code == 400


def test_create_book_rejects_non_finite_price(client, act_as, users, seeded_db):
    act_as(users["librarian"])
    for price in ("NaN", "Infinity", "-Infinity", "sNaN"):
        r = client.post("/books", json={"title": "X", "price": price})
        assert r.status_code == 400
        assert r.json()["code"] == "invalid_price"
    assert [b["id"] for b in seeded_db.rows("books")] == ["B1"]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True
    assert r.json()["rate_limit"]["enabled"] is False


def test_health_supabase_ok(client):
    r = client.get("/health/supabase")
    assert r.status_code == 200
    info = r.json()
    assert info["hostname"] == "fake.supabase.test"
    assert set(info["tables"]) == {"books", "customer_orders", "invoices"}


def test_health_supabase_closed_db_is_503():
    app = create_app()
    app.dependency_overrides[get_db] = lambda: Database(url="https://x.supabase.co", key="k")
    with TestClient(app) as c:
        r = c.get("/health/supabase")
    assert r.status_code == 503
    assert r.json()["connect_ok"] is False


def test_store_failure_maps_to_503(client, seeded_db, monkeypatch):
    broken = MagicMock()
    broken.table.side_effect = ConnectionError("db down")
    client.app.dependency_overrides[get_db] = lambda: broken
    r = client.get("/books")
    assert r.status_code == 503
    assert r.json()["kind"] == "store"


def test_missing_db_handle_is_503():
    app = create_app()
    with TestClient(app) as c:
        r = c.get("/books")
    assert r.status_code == 503
    assert r.json()["code"] == "db_closed"
