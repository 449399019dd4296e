from __future__ import annotations

import math
import os
import sqlite3
from typing import Any, Dict, List, Optional, Sequence

from app.core.config import get_settings
from app.core.errors import StoreError

ITEMS_PER_PAGE = 6

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS customers (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    image_url TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS invoices (
    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
    customer_id TEXT NOT NULL REFERENCES customers(id),
    amount INTEGER NOT NULL,
    status TEXT NOT NULL CHECK (status IN ('pending', 'paid')),
    date TEXT NOT NULL
);
"""


def _dict_factory(cursor: sqlite3.Cursor, row: Any) -> Dict[str, Any]:
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def get_connection() -> sqlite3.Connection:
    """Una conexión por llamada; el path sale de DATABASE_PATH."""
    conn = sqlite3.connect(get_settings().database_path)
    conn.row_factory = _dict_factory
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def _execute(statement: str, params: Sequence[Any] = ()) -> int:
    """Ejecuta 1 statement de escritura. Devuelve filas afectadas."""
    conn = None
    try:
        conn = get_connection()
        cur = conn.execute(statement, params)
        conn.commit()
        return cur.rowcount
    except (sqlite3.Error, OverflowError) as e:
        # OverflowError: el driver no puede bindear un int fuera de int64
        raise StoreError(str(e), details={"driver_error": type(e).__name__}) from e
    finally:
        if conn is not None:
            conn.close()


def _query(statement: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
    conn = None
    try:
        conn = get_connection()
        return conn.execute(statement, params).fetchall()
    except sqlite3.Error as e:
        raise StoreError(str(e), details={"driver_error": type(e).__name__}) from e
    finally:
        if conn is not None:
            conn.close()


# -------------------------
# Schema / seed
# -------------------------

def init_schema() -> None:
    path = get_settings().database_path
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)

    conn = get_connection()
    try:
        conn.executescript(SCHEMA)
        conn.commit()
    finally:
        conn.close()


# -------------------------
# Mutations (1 statement c/u, sin chequeo de existencia)
# -------------------------

def insert_invoice(customer_id: str, amount: int, status: str, date: str) -> int:
    return _execute(
        """
        INSERT INTO invoices (customer_id, amount, status, date)
        VALUES (?, ?, ?, ?)
        """,
        (customer_id, amount, status, date),
    )


def update_invoice(invoice_id: str, customer_id: str, amount: int, status: str) -> int:
    return _execute(
        """
        UPDATE invoices
        SET customer_id = ?, amount = ?, status = ?
        WHERE id = ?
        """,
        (customer_id, amount, status, invoice_id),
    )


def delete_invoice(invoice_id: str) -> int:
    return _execute("DELETE FROM invoices WHERE id = ?", (invoice_id,))


# -------------------------
# Reads
# -------------------------

def _search_clause(query: str) -> tuple[str, List[str]]:
    # LIKE en sqlite ya es case-insensitive para ASCII
    pattern = f"%{query}%"
    clause = """
        customers.name LIKE ? OR
        customers.email LIKE ? OR
        CAST(invoices.amount AS TEXT) LIKE ? OR
        invoices.date LIKE ? OR
        invoices.status LIKE ?
    """
    return clause, [pattern] * 5


def fetch_filtered_invoices(query: str = "", page: int = 1) -> List[Dict[str, Any]]:
    clause, params = _search_clause(query)
    offset = (max(page, 1) - 1) * ITEMS_PER_PAGE
    return _query(
        f"""
        SELECT
            invoices.id,
            invoices.amount,
            invoices.date,
            invoices.status,
            customers.name,
            customers.email,
            customers.image_url
        FROM invoices
        JOIN customers ON invoices.customer_id = customers.id
        WHERE {clause}
        ORDER BY invoices.date DESC, invoices.rowid DESC
        LIMIT ? OFFSET ?
        """,
        [*params, ITEMS_PER_PAGE, offset],
    )


def fetch_invoices_pages(query: str = "") -> int:
    clause, params = _search_clause(query)
    rows = _query(
        f"""
        SELECT COUNT(*) AS count
        FROM invoices
        JOIN customers ON invoices.customer_id = customers.id
        WHERE {clause}
        """,
        params,
    )
    return math.ceil(rows[0]["count"] / ITEMS_PER_PAGE)


def fetch_invoice_by_id(invoice_id: str) -> Optional[Dict[str, Any]]:
    """Devuelve el invoice con `amount` en unidades mayores (para el form)."""
    rows = _query(
        "SELECT id, customer_id, amount, status, date FROM invoices WHERE id = ?",
        (invoice_id,),
    )
    if not rows:
        return None

    d = rows[0]
    d["amount"] = d["amount"] / 100
    return d


def fetch_customers() -> List[Dict[str, Any]]:
    return _query("SELECT id, name FROM customers ORDER BY name ASC")


def fetch_latest_invoices(limit: int = 5) -> List[Dict[str, Any]]:
    return _query(
        """
        SELECT invoices.id, invoices.amount, customers.name, customers.email, customers.image_url
        FROM invoices
        JOIN customers ON invoices.customer_id = customers.id
        ORDER BY invoices.date DESC, invoices.rowid DESC
        LIMIT ?
        """,
        (limit,),
    )


def fetch_card_data() -> Dict[str, int]:
    invoices = _query("SELECT COUNT(*) AS count FROM invoices")[0]["count"]
    customers = _query("SELECT COUNT(*) AS count FROM customers")[0]["count"]
    totals = _query(
        """
        SELECT
            COALESCE(SUM(CASE WHEN status = 'paid' THEN amount ELSE 0 END), 0) AS paid,
            COALESCE(SUM(CASE WHEN status = 'pending' THEN amount ELSE 0 END), 0) AS pending
        FROM invoices
        """
    )[0]
    return {
        "number_of_invoices": invoices,
        "number_of_customers": customers,
        "total_paid_invoices": totals["paid"],
        "total_pending_invoices": totals["pending"],
    }


def get_user(email: str) -> Optional[Dict[str, Any]]:
    rows = _query("SELECT id, name, email, password FROM users WHERE email = ?", (email,))
    return rows[0] if rows else None


def insert_user(name: str, email: str, password_hash: str) -> int:
    return _execute(
        "INSERT OR IGNORE INTO users (name, email, password) VALUES (?, ?, ?)",
        (name, email, password_hash),
    )


def insert_customer(customer_id: str, name: str, email: str, image_url: str = "") -> int:
    return _execute(
        "INSERT OR IGNORE INTO customers (id, name, email, image_url) VALUES (?, ?, ?, ?)",
        (customer_id, name, email, image_url),
    )
