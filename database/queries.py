# =============================================================================
# database/queries.py
# =============================================================================
# PURPOSE:
#   Contains all database queries - loading and saving data.
#   This is the "data access layer" - the only code that talks to the database.
#
# ORGANIZATION:
#   One StorageGateway object wraps the connection pool. Its methods are
#   grouped by table:
#   - Customers (load_customers, create_customer, upsert_customer, ...)
#   - Invoices (load_invoices, upsert_invoice, ...)
#   - Transactions (load_transactions, insert_transaction_ignore_conflict, ...)
#   - Users (load_users, create_user, ...)
#
# NAMING CONVENTION:
#   - load_X() → Read data (SELECT)
#   - create_X() → Insert new data (INSERT)
#   - update_X() → Modify existing data (UPDATE, partial)
#   - delete_X() → Remove data (DELETE)
#   - upsert_X() → Insert, or update the existing row with the same natural key
#
# ERRORS:
#   Unlike a UI that can shrug and show an empty table, the API must tell the
#   caller a write failed. sqlite3 errors are therefore NOT caught here; they
#   travel up to the HTTP layer which turns them into a 500.
#
# PARAMETERIZED QUERIES:
#   Every value goes through a "?" placeholder. Column names that appear in
#   f-strings come only from the fixed lists below, never from user input.
# =============================================================================

from .connection import transaction


# Columns a caller may write, per table (id/created_at are generated)
CUSTOMER_COLUMNS = ["identification_number", "name", "address", "phone", "email"]
INVOICE_COLUMNS = ["invoice_number", "customer_id", "billing_period", "invoiced_amount", "paid_amount"]
TRANSACTION_COLUMNS = [
    "transaction_id", "invoice_id", "transaction_date", "amount", "status", "type", "platform",
]
USER_COLUMNS = ["username", "role"]


def _row_to_dict(row):
    """Turn a sqlite3.Row into a plain dict (None stays None)."""
    return dict(row) if row is not None else None


def _first(cursor):
    """
    First row of a RETURNING statement, or None.

    fetchall() rather than fetchone(): sqlite3 only finishes the write once
    the statement has been stepped to the end, and an unfinished statement
    blocks COMMIT.
    """
    rows = cursor.fetchall()
    return rows[0] if rows else None


class StorageGateway:
    """
    Executes parameterized statements against the store.

    USAGE:
        pool = ConnectionPool("cartera.db")
        gateway = StorageGateway(pool)
        customer_id, was_inserted = gateway.upsert_customer("1001", {"name": "Ana"})

    The pool is created and closed by whoever owns the process (the server's
    start-up/shutdown hooks); the gateway only borrows connections from it.
    """

    def __init__(self, pool):
        self.pool = pool

    # =========================================================================
    # GENERIC HELPERS
    # =========================================================================

    def _load_all(self, table, order_by):
        with self.pool.connection() as conn:
            rows = conn.execute(f"SELECT * FROM {table} ORDER BY {order_by}").fetchall()
        return [_row_to_dict(r) for r in rows]

    def _load_one(self, table, key_column, key):
        with self.pool.connection() as conn:
            row = conn.execute(
                f"SELECT * FROM {table} WHERE {key_column} = ?", (key,)
            ).fetchone()
        return _row_to_dict(row)

    def _insert(self, table, columns, data):
        """INSERT the given columns and return the full new row."""
        values = [data.get(col) for col in columns]
        placeholders = ", ".join(["?"] * len(columns))
        with self.pool.connection() as conn:
            row = _first(conn.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) RETURNING *",
                values,
            ))
        return _row_to_dict(row)

    def _update(self, table, key_column, key, columns, updates):
        """
        Partial UPDATE with null-preserving semantics.

        HOW IT WORKS:
            Every column is written as COALESCE(?, column). A field the caller
            did not send (or sent as null) binds NULL, and COALESCE keeps the
            value already stored. So PATCH {"name": "X"} touches name only.

        RETURNS:
            dict: the updated row, or None if no row has that key
        """
        set_clause = ", ".join(f"{col} = COALESCE(?, {col})" for col in columns)
        values = [updates.get(col) for col in columns] + [key]
        with self.pool.connection() as conn:
            row = _first(conn.execute(
                f"UPDATE {table} SET {set_clause} WHERE {key_column} = ? RETURNING *",
                values,
            ))
        return _row_to_dict(row)

    def _delete(self, table, key_column, key):
        """DELETE one row and return it, or None if it did not exist."""
        with self.pool.connection() as conn:
            row = _first(conn.execute(
                f"DELETE FROM {table} WHERE {key_column} = ? RETURNING *", (key,)
            ))
        return _row_to_dict(row)

    # =========================================================================
    # CUSTOMERS QUERIES
    # =========================================================================

    def load_customers(self):
        """All customers, ordered by id."""
        return self._load_all("customers", "id")

    def load_customer_by_id(self, customer_id):
        return self._load_one("customers", "id", customer_id)

    def create_customer(self, data):
        customer = self._insert("customers", CUSTOMER_COLUMNS, data)
        print(f"[OK] Created customer #{customer['id']}: {customer['identification_number']}")
        return customer

    def update_customer(self, customer_id, updates):
        return self._update("customers", "id", customer_id, CUSTOMER_COLUMNS, updates)

    def delete_customer(self, customer_id):
        return self._delete("customers", "id", customer_id)

    def upsert_customer(self, identification_number, fields):
        """
        Insert a customer, or refresh the name of the one that already has
        this identification number.

        PARAMETERS:
            identification_number (str): natural key
            fields (dict): name, address, phone, email

        RETURNS:
            tuple: (customer_id, was_inserted)
            - was_inserted is False when the row already existed

        NAME ON CONFLICT:
            The stored name is replaced by the incoming one, EXCEPT when the
            incoming name is empty (NULL): then the stored name is kept, so a
            file without names never wipes them out.

        HOW "was_inserted" IS KNOWN:
            Inside one BEGIN IMMEDIATE transaction we first look the key up,
            then run the upsert. Nobody else can write in between, so "not
            found before" means "inserted now".
        """
        with self.pool.connection() as conn, transaction(conn):
            existing = _first(conn.execute(
                "SELECT id FROM customers WHERE identification_number = ?",
                (identification_number,),
            ))
            row = _first(conn.execute(
                """
                INSERT INTO customers (identification_number, name, address, phone, email)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(identification_number)
                DO UPDATE SET name = COALESCE(excluded.name, customers.name)
                RETURNING id
                """,
                (
                    identification_number,
                    fields.get("name"),
                    fields.get("address"),
                    fields.get("phone"),
                    fields.get("email"),
                ),
            ))
        return row["id"], existing is None

    def bulk_upsert_customers(self, records):
        """
        Batch insert of customers (legacy single-entity import).

        One parameterized statement executed once per record with
        executemany(), inside a single transaction. Existing identification
        numbers get their name refreshed, as in upsert_customer().

        RETURNS:
            int: number of NEW customers (refreshed ones are not counted;
                 the table is counted before and after, inside the same
                 BEGIN IMMEDIATE, so no other writer can skew it)
        """
        if not records:
            return 0
        params = [
            (
                r.get("identification_number"),
                r.get("name"),
                r.get("address"),
                r.get("phone"),
                r.get("email"),
            )
            for r in records
        ]
        with self.pool.connection() as conn, transaction(conn):
            before = conn.execute("SELECT COUNT(*) FROM customers").fetchone()[0]
            conn.executemany(
                """
                INSERT INTO customers (identification_number, name, address, phone, email)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(identification_number)
                DO UPDATE SET name = COALESCE(excluded.name, customers.name)
                """,
                params,
            )
            count = conn.execute("SELECT COUNT(*) FROM customers").fetchone()[0] - before
        print(f"[OK] Wrote {len(params)} customers in one batch ({count} new)")
        return count

    # =========================================================================
    # INVOICES QUERIES
    # =========================================================================

    def load_invoices(self):
        """All invoices, ordered by id."""
        return self._load_all("invoices", "id")

    def load_invoice_by_id(self, invoice_id):
        return self._load_one("invoices", "id", invoice_id)

    def create_invoice(self, data):
        invoice = self._insert("invoices", INVOICE_COLUMNS, data)
        print(f"[OK] Created invoice #{invoice['id']}: {invoice['invoice_number']}")
        return invoice

    def update_invoice(self, invoice_id, updates):
        return self._update("invoices", "id", invoice_id, INVOICE_COLUMNS, updates)

    def delete_invoice(self, invoice_id):
        return self._delete("invoices", "id", invoice_id)

    def upsert_invoice(self, invoice_number, customer_id, fields):
        """
        Insert an invoice, or update the invoiced amount of the one that
        already has this invoice number.

        PARAMETERS:
            invoice_number (str): natural key
            customer_id (int): surrogate id of the owning customer
            fields (dict): billing_period, invoiced_amount, paid_amount

        RETURNS:
            tuple: (invoice_id, was_inserted)
        """
        with self.pool.connection() as conn, transaction(conn):
            existing = _first(conn.execute(
                "SELECT id FROM invoices WHERE invoice_number = ?", (invoice_number,)
            ))
            row = _first(conn.execute(
                """
                INSERT INTO invoices
                    (invoice_number, customer_id, billing_period, invoiced_amount, paid_amount)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(invoice_number)
                DO UPDATE SET invoiced_amount = excluded.invoiced_amount
                RETURNING id
                """,
                (
                    invoice_number,
                    customer_id,
                    fields.get("billing_period"),
                    fields.get("invoiced_amount"),
                    fields.get("paid_amount"),
                ),
            ))
        return row["id"], existing is None

    # =========================================================================
    # TRANSACTIONS QUERIES
    # =========================================================================

    def load_transactions(self):
        """All transactions, ordered by their id."""
        return self._load_all("transactions", "transaction_id")

    def load_transaction_by_id(self, transaction_id):
        return self._load_one("transactions", "transaction_id", transaction_id)

    def create_transaction(self, data):
        tx = self._insert("transactions", TRANSACTION_COLUMNS, data)
        print(f"[OK] Created transaction {tx['transaction_id']}")
        return tx

    def update_transaction(self, transaction_id, updates):
        # The key itself is not updatable through PATCH
        columns = [c for c in TRANSACTION_COLUMNS if c != "transaction_id"]
        return self._update("transactions", "transaction_id", transaction_id, columns, updates)

    def delete_transaction(self, transaction_id):
        return self._delete("transactions", "transaction_id", transaction_id)

    def insert_transaction_ignore_conflict(self, transaction_id, invoice_id, fields):
        """
        Insert a transaction; silently do nothing if the id already exists.

        RETURNS:
            bool: True if a row was written, False if the id was taken
        """
        with self.pool.connection() as conn:
            cursor = conn.execute(
                """
                INSERT INTO transactions
                    (transaction_id, invoice_id, transaction_date, amount, status, type, platform)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(transaction_id) DO NOTHING
                """,
                (
                    transaction_id,
                    invoice_id,
                    fields.get("transaction_date"),
                    fields.get("amount"),
                    fields.get("status"),
                    fields.get("type"),
                    fields.get("platform"),
                ),
            )
            return cursor.rowcount == 1

    # =========================================================================
    # USERS QUERIES
    # =========================================================================

    def load_users(self):
        """All users, ordered by id."""
        return self._load_all("users", "id")

    def create_user(self, data):
        user = self._insert("users", USER_COLUMNS, data)
        print(f"[OK] Created user #{user['id']}: {user['username']}")
        return user

    def update_user(self, user_id, updates):
        return self._update("users", "id", user_id, USER_COLUMNS, updates)

    def delete_user(self, user_id):
        return self._delete("users", "id", user_id)
