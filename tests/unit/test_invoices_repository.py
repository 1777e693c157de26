import pytest
from unittest.mock import MagicMock
from postgrest.exceptions import APIError

import backend.invoices.repository as repo
from backend.utils.errors import StoreError


class _Resp:
    def __init__(self, data=None):
        self.data = data


def _mk_client():
    db = MagicMock()
    table = MagicMock()
    db.table.return_value = table
    return db, table


INVOICE = {"payment_intent_id": "pi_1", "order_id": "O1", "customer": "a@x.com", "amount": "20.00"}


def test_insert_invoice_returns_created_row():
    db, table = _mk_client()
    table.insert.return_value.execute.return_value = _Resp(data=[dict(INVOICE, id="inv1")])
    assert repo.insert_invoice_if_absent(db, INVOICE)["id"] == "inv1"
    table.insert.assert_called_once_with(INVOICE)


def test_insert_invoice_falls_back_to_payload_when_no_representation():
    db, table = _mk_client()
    table.insert.return_value.execute.return_value = _Resp(data=[])
    assert repo.insert_invoice_if_absent(db, INVOICE) == INVOICE


def test_insert_invoice_duplicate_returns_none():
    db, table = _mk_client()
    table.insert.return_value.execute.side_effect = APIError({"code": "23505", "message": "duplicate key"})
    assert repo.insert_invoice_if_absent(db, INVOICE) is None


def test_insert_invoice_other_api_error_raises_store_error():
    db, table = _mk_client()
    table.insert.return_value.execute.side_effect = APIError({"code": "42501", "message": "permission denied"})
    with pytest.raises(StoreError) as exc:
        repo.insert_invoice_if_absent(db, INVOICE)
    assert exc.value.code == "invoice_insert_failed"


def test_insert_invoice_network_error_raises_store_error():
    db, table = _mk_client()
    table.insert.return_value.execute.side_effect = ConnectionError("boom")
    with pytest.raises(StoreError):
        repo.insert_invoice_if_absent(db, INVOICE)


def test_find_by_payment_intent(fake_db):
    fake_db.tables["invoices"].append(dict(INVOICE))
    assert repo.find_by_payment_intent(fake_db, "pi_1")["order_id"] == "O1"
    assert repo.find_by_payment_intent(fake_db, "pi_other") is None


def test_list_by_owner_most_recent_first(fake_db):
    fake_db.tables["invoices"].extend([
        dict(INVOICE, payment_intent_id="pi_1", issued_at="2026-10-01T00:00:00+00:00"),
        dict(INVOICE, payment_intent_id="pi_2", issued_at="2026-10-03T00:00:00+00:00"),
        dict(INVOICE, payment_intent_id="pi_3", customer="z@x.com", issued_at="2026-10-02T00:00:00+00:00"),
    ])
    rows = repo.list_by_owner(fake_db, "a@x.com")
    assert [r["payment_intent_id"] for r in rows] == ["pi_2", "pi_1"]


def test_list_by_owner_store_failure():
    db, table = _mk_client()
    table.select.side_effect = RuntimeError("down")
    with pytest.raises(StoreError):
        repo.list_by_owner(db, "a@x.com")
