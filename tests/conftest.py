import os

# Avant tout import de backend: pas de base réelle ni de Redis pendant les tests
os.environ.setdefault("DISABLE_DB_INIT_FOR_TESTS", "1")
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import itertools
import threading
from typing import Any, Dict, Generator, List, Optional, Tuple
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from backend.app_setup.factory import create_app
from backend.config import BOOKS_TABLE, ORDERS_TABLE, INVOICES_TABLE
from backend.infra.supabase_client import get_db
from backend.payments.models import SessionSnapshot
from backend.utils.security import get_current_user


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


class _Result:
    def __init__(self, data):
        self.data = data
        self.count = None


class FakeQuery:
    """Chaîne fluide PostgREST minimale (select/insert/update/delete, eq, order, limit)."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.op = None
        self.payload = None
        self.filters: List[Tuple[str, Any]] = []
        self._order = None
        self._limit = None

    def select(self, *columns, **kwargs):
        self.op = self.op or "select"
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def update(self, fields):
        self.op, self.payload = "update", fields
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, n):
        self._limit = n
        return self

    def _matches(self, row):
        return all(str(row.get(c)) == str(v) for c, v in self.filters)

    def execute(self):
        with self.db.lock:
            self.db.calls.append((self.table, self.op))
            rows = self.db.tables.setdefault(self.table, [])
            if self.op == "insert":
                row = dict(self.payload)
                row.setdefault("id", f"{self.table}-{next(self.db.ids)}")
                for column in self.db.unique.get(self.table, ()):
                    if any(r.get(column) == row.get(column) for r in rows):
                        raise APIError({"code": "23505", "message": f"duplicate key value violates unique constraint ({column})"})
                rows.append(row)
                return _Result([dict(row)])
            matched = [r for r in rows if self._matches(r)]
            if self.op == "update":
                for r in matched:
                    r.update(self.payload)
                return _Result([dict(r) for r in matched])
            if self.op == "delete":
                for r in matched:
                    rows.remove(r)
                return _Result([dict(r) for r in matched])
            if self._order:
                column, desc = self._order
                matched = sorted(matched, key=lambda r: str(r.get(column) or ""), reverse=desc)
            if self._limit is not None:
                matched = matched[: self._limit]
            return _Result([dict(r) for r in matched])


class FakeSupabase:
    """Remplace Database: tables en mémoire, contrainte UNIQUE sur invoices.payment_intent_id."""

    url = "https://fake.supabase.test"
    is_open = True

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {BOOKS_TABLE: [], ORDERS_TABLE: [], INVOICES_TABLE: []}
        self.unique = {INVOICES_TABLE: ("payment_intent_id",)}
        self.calls: List[Tuple[str, str]] = []
        self.ids = itertools.count(1)
        self.lock = threading.Lock()
        self.auth = MagicMock()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def writes(self) -> List[Tuple[str, str]]:
        return [c for c in self.calls if c[1] in ("insert", "update", "delete")]

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables[name]


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def seeded_db(fake_db) -> FakeSupabase:
    """Scénario de référence: livre B1 (20.00) et commande O1 pending/unpaid de a@x.com."""
    fake_db.tables[BOOKS_TABLE].append({
        "id": "B1",
        "title": "Dune",
        "price": "20.00",
        "quantity": 5,
        "status": "published",
        "librarian_email": "lib@x.com",
    })
    fake_db.tables[ORDERS_TABLE].append({
        "id": "O1",
        "email": "a@x.com",
        "fulfiller": "lib@x.com",
        "book_id": "B1",
        "book_name": "Dune",
        "quantity": 1,
        "price": "20.00",
        "order_status": "pending",
        "payment_status": "unpaid",
        "ordered_at": "2026-10-01T10:00:00+00:00",
    })
    return fake_db


@pytest.fixture
def make_snapshot():
    def _make(session_id="S1", payment_status="paid", payment_intent_id="pi_1", amount_total=2000, **metadata):
        meta = {"orderId": "O1", "bookId": "B1", "customer": "a@x.com", "quantity": "1"}
        meta.update(metadata)
        return SessionSnapshot(
            session_id=session_id,
            payment_status=payment_status,
            metadata=meta,
            amount_total=amount_total,
            payment_intent_id=payment_intent_id,
        )
    return _make


CUSTOMER = {"id": "u-a", "email": "a@x.com", "role": "user", "metadata": {}, "token": "tok-a"}
LIBRARIAN = {"id": "u-lib", "email": "lib@x.com", "role": "librarian", "metadata": {"role": "librarian"}, "token": "tok-lib"}
ADMIN = {"id": "u-admin", "email": "admin@x.com", "role": "admin", "metadata": {"role": "admin"}, "token": "tok-admin"}
STRANGER = {"id": "u-z", "email": "z@x.com", "role": "user", "metadata": {}, "token": "tok-z"}


@pytest.fixture
def users() -> Dict[str, Dict[str, Any]]:
    return {"customer": CUSTOMER, "librarian": LIBRARIAN, "admin": ADMIN, "stranger": STRANGER}


@pytest.fixture
def app(seeded_db):
    fastapi_app = create_app()
    fastapi_app.dependency_overrides[get_db] = lambda: seeded_db
    fastapi_app.dependency_overrides[get_current_user] = lambda: CUSTOMER
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def act_as(app):
    """Change l'utilisateur courant: act_as(users['librarian']); act_as(None) retire l'authentification."""
    def _act(user: Optional[Dict[str, Any]]):
        if user is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = lambda: user
    return _act
