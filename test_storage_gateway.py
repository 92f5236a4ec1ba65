# =============================================================================
# test_storage_gateway.py - pool, schema and queries against a real SQLite file
# =============================================================================

import sqlite3

import pytest

from database import ConnectionPool, PoolClosedError, PoolTimeoutError, get_table_info, transaction


# -----------------------------------------------------------------------------
# POOL + SCHEMA
# -----------------------------------------------------------------------------

def test_schema_has_all_tables(pool):
    tables = get_table_info(pool)

    assert {"customers", "invoices", "transactions", "users"} <= set(tables)
    assert "identification_number" in tables["customers"]
    assert "customer_id" in tables["invoices"]
    assert "invoice_id" in tables["transactions"]


def test_pool_waits_then_times_out(tmp_path):
    pool = ConnectionPool(str(tmp_path / "p.db"), size=1, timeout=0.1)

    with pool.connection() as conn:
        with pytest.raises(PoolTimeoutError):
            with pool.connection():
                pass

    # The connection went back to the pool and is handed out again
    with pool.connection() as again:
        assert again is conn
        assert again.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    pool.close()


def test_closed_pool_refuses_connections(tmp_path):
    pool = ConnectionPool(str(tmp_path / "p.db"), size=1)
    pool.close()

    assert pool.closed
    with pytest.raises(PoolClosedError):
        with pool.connection():
            pass


def test_transaction_rolls_back_on_error(pool, gateway):
    with pool.connection() as conn:
        with pytest.raises(RuntimeError):
            with transaction(conn):
                conn.execute(
                    "INSERT INTO customers (identification_number, name) VALUES ('1', 'Ana')"
                )
                raise RuntimeError("boom")

    assert gateway.load_customers() == []


# -----------------------------------------------------------------------------
# UPSERTS
# -----------------------------------------------------------------------------

def test_upsert_customer_is_idempotent_and_refreshes_name_only(gateway):
    first_id, inserted = gateway.upsert_customer("1001", {"name": "Ana", "address": "Calle 1"})
    assert inserted is True

    second_id, inserted = gateway.upsert_customer("1001", {"name": "Ana P", "address": "Calle 9"})
    assert inserted is False
    assert second_id == first_id

    customer = gateway.load_customer_by_id(first_id)
    assert customer["name"] == "Ana P"
    assert customer["address"] == "Calle 1"
    assert len(gateway.load_customers()) == 1


def test_upsert_customer_without_name_keeps_stored_name(gateway):
    customer_id, _ = gateway.upsert_customer("1001", {"name": "Ana"})

    _, inserted = gateway.upsert_customer("1001", {"name": None})

    assert inserted is False
    assert gateway.load_customer_by_id(customer_id)["name"] == "Ana"


def test_upsert_customer_without_key_fails(gateway):
    with pytest.raises(sqlite3.IntegrityError):
        gateway.upsert_customer(None, {"name": "Nobody"})

    assert gateway.load_customers() == []


def test_upsert_invoice_updates_invoiced_amount_only(gateway):
    customer_id, _ = gateway.upsert_customer("1001", {"name": "Ana"})

    invoice_id, inserted = gateway.upsert_invoice(
        "FAC-1", customer_id,
        {"billing_period": "2024-05-01", "invoiced_amount": 100.0, "paid_amount": 50.0},
    )
    assert inserted is True

    again_id, inserted = gateway.upsert_invoice(
        "FAC-1", customer_id,
        {"billing_period": "2024-06-01", "invoiced_amount": 120.0, "paid_amount": 120.0},
    )
    assert inserted is False
    assert again_id == invoice_id

    invoice = gateway.load_invoice_by_id(invoice_id)
    assert invoice["invoiced_amount"] == 120.0
    assert invoice["billing_period"] == "2024-05-01"
    assert invoice["paid_amount"] == 50.0


def test_duplicate_transaction_is_ignored(gateway):
    customer_id, _ = gateway.upsert_customer("1001", {"name": "Ana"})
    invoice_id, _ = gateway.upsert_invoice("FAC-1", customer_id, {})

    assert gateway.insert_transaction_ignore_conflict("TXN1", invoice_id, {"amount": 10.0}) is True
    assert gateway.insert_transaction_ignore_conflict("TXN1", invoice_id, {"amount": 99.0}) is False

    transactions = gateway.load_transactions()
    assert len(transactions) == 1
    assert transactions[0]["amount"] == 10.0


def test_bulk_upsert_customers(gateway):
    count = gateway.bulk_upsert_customers([
        {"identification_number": "1001", "name": "Ana"},
        {"identification_number": "1002", "name": None},
    ])

    assert count == 2
    assert [c["identification_number"] for c in gateway.load_customers()] == ["1001", "1002"]
    assert gateway.bulk_upsert_customers([]) == 0


def test_bulk_upsert_keeps_name_when_file_has_none(gateway):
    gateway.bulk_upsert_customers([{"identification_number": "1001", "name": "Ana"}])
    gateway.bulk_upsert_customers([{"identification_number": "1001", "name": None}])

    assert gateway.load_customers()[0]["name"] == "Ana"


def test_bulk_upsert_counts_only_new_customers(gateway):
    records = [
        {"identification_number": "1001", "name": "Ana"},
        {"identification_number": "1002", "name": "Luis"},
    ]
    assert gateway.bulk_upsert_customers(records) == 2

    again = gateway.bulk_upsert_customers(records + [{"identification_number": "1003", "name": "Eva"}])

    assert again == 1
    assert gateway.bulk_upsert_customers(records) == 0
    assert len(gateway.load_customers()) == 3


# -----------------------------------------------------------------------------
# PLAIN CRUD
# -----------------------------------------------------------------------------

def test_partial_update_preserves_other_fields(gateway):
    customer = gateway.create_customer(
        {"identification_number": "1001", "name": "Ana", "email": "ana@mail.com"}
    )

    updated = gateway.update_customer(customer["id"], {"name": "Ana María", "email": None})

    assert updated["name"] == "Ana María"
    assert updated["email"] == "ana@mail.com"
    assert updated["identification_number"] == "1001"


def test_update_missing_row_returns_none(gateway):
    assert gateway.update_customer(999, {"name": "X"}) is None


def test_delete_returns_row_then_none(gateway):
    customer = gateway.create_customer({"identification_number": "1001", "name": "Ana"})

    deleted = gateway.delete_customer(customer["id"])

    assert deleted["identification_number"] == "1001"
    assert gateway.delete_customer(customer["id"]) is None


def test_deleting_customer_cascades(gateway):
    customer_id, _ = gateway.upsert_customer("1001", {"name": "Ana"})
    invoice_id, _ = gateway.upsert_invoice("FAC-1", customer_id, {})
    gateway.insert_transaction_ignore_conflict("TXN1", invoice_id, {})

    gateway.delete_customer(customer_id)

    assert gateway.load_invoices() == []
    assert gateway.load_transactions() == []


def test_transaction_crud_uses_string_ids(gateway):
    customer_id, _ = gateway.upsert_customer("1001", {"name": "Ana"})
    invoice_id, _ = gateway.upsert_invoice("FAC-1", customer_id, {})

    gateway.create_transaction({"transaction_id": "TXN-A", "invoice_id": invoice_id, "status": "PENDING"})
    updated = gateway.update_transaction("TXN-A", {"status": "COMPLETED"})

    assert updated["status"] == "COMPLETED"
    assert gateway.load_transaction_by_id("TXN-A")["invoice_id"] == invoice_id
    assert gateway.delete_transaction("TXN-A")["transaction_id"] == "TXN-A"


def test_users(gateway):
    user = gateway.create_user({"username": "ana", "role": "member"})

    assert gateway.update_user(user["id"], {"role": "admin"})["role"] == "admin"
    assert [u["username"] for u in gateway.load_users()] == ["ana"]
