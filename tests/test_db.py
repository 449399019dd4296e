import pytest

from app import db
from app.core.errors import StoreError
from app.seed import CUSTOMERS, INVOICES, seed


def test_seed_is_idempotent(seeded_db, fetch_all) -> None:
    seed()

    assert fetch_all("SELECT COUNT(*) AS n FROM invoices")[0]["n"] == len(INVOICES)
    assert fetch_all("SELECT COUNT(*) AS n FROM customers")[0]["n"] == len(CUSTOMERS)
    assert fetch_all("SELECT COUNT(*) AS n FROM users")[0]["n"] == 1


def test_insert_assigns_id(seeded_db, fetch_all) -> None:
    assert db.insert_invoice("cust_lee", 500, "paid", "2024-02-01") == 1

    row = fetch_all("SELECT * FROM invoices WHERE date = '2024-02-01'")[0]
    assert len(row["id"]) == 32


def test_update_and_delete_rowcounts(seeded_db) -> None:
    assert db.update_invoice("missing", "cust_lee", 1, "paid") == 0
    assert db.delete_invoice("missing") == 0


def test_status_constraint_raises_store_error(seeded_db) -> None:
    with pytest.raises(StoreError) as exc_info:
        db.insert_invoice("cust_lee", 500, "overdue", "2024-02-01")

    assert exc_info.value.code == "DATABASE_ERROR"
    assert exc_info.value.status_code == 500
    assert "CHECK constraint failed" in str(exc_info.value)


def test_amount_outside_int64_raises_store_error(seeded_db) -> None:
    with pytest.raises(StoreError) as exc_info:
        db.insert_invoice("cust_lee", 10**19, "paid", "2024-02-01")

    assert exc_info.value.details == {"driver_error": "OverflowError"}


def test_fetch_invoice_by_id_uses_major_units(seeded_db, fetch_all) -> None:
    invoice_id = fetch_all("SELECT id FROM invoices WHERE amount = 15795")[0]["id"]

    invoice = db.fetch_invoice_by_id(invoice_id)

    assert invoice["amount"] == 157.95
    assert invoice["customer_id"] == "cust_evil_rabbit"
    assert db.fetch_invoice_by_id("missing") is None


def test_filtered_invoices_paginate(seeded_db) -> None:
    first = db.fetch_filtered_invoices("", 1)
    second = db.fetch_filtered_invoices("", 2)

    assert len(first) == db.ITEMS_PER_PAGE
    assert len(second) == len(INVOICES) - db.ITEMS_PER_PAGE
    assert db.fetch_invoices_pages("") == 2
    # más nuevo primero
    assert first[0]["date"] == "2023-09-10"


def test_filtered_invoices_search(seeded_db) -> None:
    rows = db.fetch_filtered_invoices("lee robinson", 1)

    assert {r["name"] for r in rows} == {"Lee Robinson"}
    assert len(rows) == 2
    assert db.fetch_invoices_pages("no-such-customer") == 0


def test_card_data(seeded_db) -> None:
    cards = db.fetch_card_data()

    assert cards["number_of_invoices"] == len(INVOICES)
    assert cards["number_of_customers"] == len(CUSTOMERS)
    assert cards["total_paid_invoices"] == 3040 + 44800
    assert cards["total_pending_invoices"] == 15795 + 20348 + 34577 + 54246 + 666


def test_customers_sorted_by_name(seeded_db) -> None:
    names = [c["name"] for c in db.fetch_customers()]

    assert names == sorted(names)


def test_get_user(seeded_db) -> None:
    user = db.get_user("user@nextmail.com")

    assert user["name"] == "User"
    assert user["password"] != "123456"
    assert db.get_user("ghost@nextmail.com") is None
