# =============================================================================
# database/schema.py
# =============================================================================
# PURPOSE:
#   Defines the DATABASE SCHEMA - the structure of all tables.
#
# DATA MODEL:
#   [CUSTOMERS] ←── one row per customer, natural key identification_number
#      ↑
#      └── [INVOICES] ←── bills, natural key invoice_number
#             ↑
#             └── [TRANSACTIONS] ←── payments, key transaction_id (external)
#
#   [USERS] ←── people who use the app (username + role), stands alone
#
# NATURAL KEYS vs SURROGATE IDS:
#   Every customer/invoice gets an INTEGER id generated by SQLite. That id is
#   what foreign keys point at. The business identifiers (identification
#   number, invoice number) are UNIQUE so importing the same file twice finds
#   the same rows instead of creating new ones.
#
#   Transactions are different: their id comes from the file itself, so it
#   is the primary key directly.
# =============================================================================


SCHEMA_STATEMENTS = [
    # =====================================================================
    # TABLE 1: CUSTOMERS
    # =====================================================================
    """
    CREATE TABLE IF NOT EXISTS customers (
        id INTEGER PRIMARY KEY AUTOINCREMENT,

        -- Government/company identification number (UNIQUE natural key)
        identification_number TEXT NOT NULL UNIQUE,

        name TEXT,
        address TEXT,
        phone TEXT,
        email TEXT,

        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # =====================================================================
    # TABLE 2: INVOICES
    # =====================================================================
    """
    CREATE TABLE IF NOT EXISTS invoices (
        id INTEGER PRIMARY KEY AUTOINCREMENT,

        -- Invoice number (UNIQUE - re-import finds the same invoice)
        invoice_number TEXT NOT NULL UNIQUE,

        -- Who was billed
        customer_id INTEGER NOT NULL,

        -- First day of the billed month, e.g. "2024-05-01"
        billing_period TEXT,

        invoiced_amount REAL,
        paid_amount REAL,

        created_at TEXT DEFAULT CURRENT_TIMESTAMP,

        FOREIGN KEY(customer_id) REFERENCES customers(id) ON DELETE CASCADE
    )
    """,
    # =====================================================================
    # TABLE 3: TRANSACTIONS
    # =====================================================================
    """
    CREATE TABLE IF NOT EXISTS transactions (
        -- Comes from the payment platform, NOT generated by us
        transaction_id TEXT PRIMARY KEY NOT NULL,

        invoice_id INTEGER NOT NULL,

        transaction_date TEXT,
        amount REAL,

        -- PENDING / COMPLETED / FAILED (or whatever the file said)
        status TEXT,
        -- INVOICE_PAYMENT (or whatever the file said)
        type TEXT,
        platform TEXT,

        created_at TEXT DEFAULT CURRENT_TIMESTAMP,

        FOREIGN KEY(invoice_id) REFERENCES invoices(id) ON DELETE CASCADE
    )
    """,
    # =====================================================================
    # TABLE 4: USERS
    # =====================================================================
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'member',
        created_at TEXT DEFAULT CURRENT_TIMESTAMP
    )
    """,
    # Indexes for the foreign keys (joins and cascades)
    "CREATE INDEX IF NOT EXISTS idx_invoices_customer ON invoices(customer_id)",
    "CREATE INDEX IF NOT EXISTS idx_transactions_invoice ON transactions(invoice_id)",
]


def init_db(pool):
    """
    Initialize the database by creating all tables.

    SAFE TO CALL MULTIPLE TIMES:
        "CREATE TABLE IF NOT EXISTS" means an existing table is left alone,
        so running this at every start-up never deletes data.

    PARAMETERS:
        pool (ConnectionPool): where to borrow a connection from

    RAISES:
        sqlite3.Error if the database cannot be created. A server without
        tables is useless, so the error is not swallowed.
    """
    with pool.connection() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(statement)
    print(f"[OK] Database schema ready ({pool.db_path})")
    return True


def get_table_info(pool):
    """
    Get column names of every table (used by the tests to check the
    schema).

    RETURNS:
        dict: {table_name: [column_name, ...]}
    """
    with pool.connection() as conn:
        tables = [
            row[0]
            for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' "
                "AND name NOT LIKE 'sqlite_%' ORDER BY name"
            )
        ]
        return {
            table: [col[1] for col in conn.execute(f"PRAGMA table_info({table})")]
            for table in tables
        }
