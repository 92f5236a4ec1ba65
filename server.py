# =============================================================================
# server.py - REST API ENTRY POINT
# =============================================================================
# PURPOSE:
#   The HTTP server: CRUD for customers, invoices, transactions and users,
#   plus the three file upload endpoints.
#
# TO RUN THE SERVER:
#   cartera-api                      (installed script)
#   uvicorn server:app --port 3000   (same thing, by hand)
#
# LIFECYCLE:
#   Start-up  → open the connection pool, create the tables
#   Requests  → borrow connections through app.state.gateway
#   Shutdown  → close the pool
#
# ERRORS (every error body is {"error": "..."}):
#   ImportValidationError → 400 (bad file, missing field, malformed id)
#   RequestValidationError → 400 (body missing, not JSON, or not an object)
#   anything else         → 500 with a generic message; details are printed
#                           to the console, never sent to the caller
# =============================================================================

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import Body, FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import (
    API_HOST,
    CORS_ORIGINS,
    CUSTOMER_UPLOAD_EXTENSIONS,
    DB_PATH,
    DB_POOL_SIZE,
    DB_POOL_TIMEOUT,
    DEFAULT_USER_ROLE,
    IMPORT_UPLOAD_EXTENSIONS,
    OUTPUT_DIR,
    PORT,
    UPLOAD_DIR,
    USER_ROLES,
)
from database import ConnectionPool, StorageGateway, init_db
from importers import CustomerImporter, ImportValidationError, Normalizer, TransactionImporter
from importers.field_resolver import is_numeric_identifier
from utils.uploads import check_upload, saved_upload

GENERIC_ERROR = "Internal server error. Please try again later."
INVALID_BODY_ERROR = "Request body must be a JSON object."

# Largest id SQLite can store in an INTEGER column
SQLITE_MAX_INTEGER = 2**63 - 1

ENDPOINTS = [
    "GET    /health",
    "GET    /customers | POST /customers | PATCH/DELETE /customers/{id}",
    "POST   /customers/upload   (CSV or TXT)",
    "GET    /invoices | POST /invoices | PATCH/DELETE /invoices/{id}",
    "GET    /transactions | POST /transactions | PATCH/DELETE /transactions/{transaction_id}",
    "GET    /users | POST /users | PATCH/DELETE /users/{id}",
    "POST   /import/upload      (CSV: customer + invoice + transaction per row)",
    "POST   /import/normalize   (CSV: cleaned copy written to the output folder)",
]


# -----------------------------------------------------------------------------
# REQUEST HELPERS
# -----------------------------------------------------------------------------

def numeric_id(value):
    """Path id → int, or ImportValidationError (→ 400) if it is not digits
    or does not fit in an SQLite INTEGER."""
    if not is_numeric_identifier(value) or int(value) > SQLITE_MAX_INTEGER:
        raise ImportValidationError(f"Invalid id: {value!r}")
    return int(value)


def require_fields(payload, fields):
    """Raise ImportValidationError naming the first missing/empty field."""
    for field in fields:
        value = payload.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ImportValidationError(f"Missing required field: {field}")


def _error(status_code, message):
    return JSONResponse(status_code=status_code, content={"error": message})


# -----------------------------------------------------------------------------
# APPLICATION FACTORY
# -----------------------------------------------------------------------------

def create_app(db_path=None, pool_size=None, pool_timeout=None, upload_dir=None, output_dir=None):
    """
    Build the FastAPI application.

    PARAMETERS (all optional, default to config/settings.py):
        db_path: SQLite file
        pool_size / pool_timeout: connection pool limits
        upload_dir: where uploads are staged while processed
        output_dir: where /import/normalize writes its files

    Tests pass a temporary db_path / upload_dir / output_dir.
    """
    db_path = db_path or DB_PATH
    pool_size = pool_size or DB_POOL_SIZE
    pool_timeout = pool_timeout or DB_POOL_TIMEOUT
    upload_dir = upload_dir or UPLOAD_DIR
    output_dir = output_dir or OUTPUT_DIR

    @asynccontextmanager
    async def lifespan(app):
        pool = ConnectionPool(db_path, size=pool_size, timeout=pool_timeout)
        init_db(pool)
        app.state.pool = pool
        app.state.gateway = StorageGateway(pool)
        print(f"[OK] API ready (database: {db_path}, pool size: {pool_size})")
        try:
            yield
        finally:
            pool.close()

    app = FastAPI(title="Cartera API", lifespan=lifespan)
    app.state.upload_dir = upload_dir
    app.state.output_dir = output_dir

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.exception_handler(ImportValidationError)
    async def validation_error_handler(request: Request, exc: ImportValidationError):
        print(f"[WARN] {request.method} {request.url.path}: {exc}")
        return _error(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_body_error_handler(request: Request, exc: RequestValidationError):
        print(f"[WARN] {request.method} {request.url.path}: {exc.errors()}")
        return _error(400, INVALID_BODY_ERROR)

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        print(f"[ERROR] {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
        return _error(500, GENERIC_ERROR)

    def gateway():
        return app.state.gateway

    # =========================================================================
    # HEALTH
    # =========================================================================

    @app.get("/health")
    def health():
        return {"ok": True, "timestamp": datetime.now(timezone.utc).isoformat()}

    # =========================================================================
    # CUSTOMERS
    # =========================================================================

    @app.get("/customers")
    def list_customers():
        return gateway().load_customers()

    @app.post("/customers", status_code=201)
    def create_customer(payload: dict = Body(...)):
        require_fields(payload, ["name", "identification_number"])
        return gateway().create_customer(payload)

    @app.patch("/customers/{customer_id}")
    def update_customer(customer_id: str, payload: dict = Body(...)):
        return gateway().update_customer(numeric_id(customer_id), payload)

    @app.delete("/customers/{customer_id}")
    def delete_customer(customer_id: str):
        return gateway().delete_customer(numeric_id(customer_id))

    @app.post("/customers/upload", status_code=201)
    def upload_customers(file: Optional[UploadFile] = File(None)):
        extension = check_upload(file.filename if file else None, CUSTOMER_UPLOAD_EXTENSIONS)
        with saved_upload(file.file, app.state.upload_dir, extension) as path:
            return CustomerImporter(gateway(), path, extension).import_customers()

    # =========================================================================
    # INVOICES
    # =========================================================================

    @app.get("/invoices")
    def list_invoices():
        return gateway().load_invoices()

    @app.post("/invoices", status_code=201)
    def create_invoice(payload: dict = Body(...)):
        require_fields(payload, ["invoice_number", "customer_id"])
        return gateway().create_invoice(payload)

    @app.patch("/invoices/{invoice_id}")
    def update_invoice(invoice_id: str, payload: dict = Body(...)):
        return gateway().update_invoice(numeric_id(invoice_id), payload)

    @app.delete("/invoices/{invoice_id}")
    def delete_invoice(invoice_id: str):
        return gateway().delete_invoice(numeric_id(invoice_id))

    # =========================================================================
    # TRANSACTIONS (string ids, supplied by the payment platform)
    # =========================================================================

    @app.get("/transactions")
    def list_transactions():
        return gateway().load_transactions()

    @app.post("/transactions", status_code=201)
    def create_transaction(payload: dict = Body(...)):
        require_fields(payload, ["transaction_id", "invoice_id"])
        return gateway().create_transaction(payload)

    @app.patch("/transactions/{transaction_id}")
    def update_transaction(transaction_id: str, payload: dict = Body(...)):
        return gateway().update_transaction(transaction_id, payload)

    @app.delete("/transactions/{transaction_id}")
    def delete_transaction(transaction_id: str):
        return gateway().delete_transaction(transaction_id)

    # =========================================================================
    # USERS
    # =========================================================================

    @app.get("/users")
    def list_users():
        return gateway().load_users()

    @app.post("/users", status_code=201)
    def create_user(payload: dict = Body(...)):
        require_fields(payload, ["username"])
        role = payload.get("role") or DEFAULT_USER_ROLE
        if role not in USER_ROLES:
            raise ImportValidationError(f"Unknown role {role!r}. Use one of: {', '.join(USER_ROLES)}")
        return gateway().create_user({**payload, "role": role})

    @app.patch("/users/{user_id}")
    def update_user(user_id: str, payload: dict = Body(...)):
        user_id = numeric_id(user_id)
        role = payload.get("role")
        if role is not None and role not in USER_ROLES:
            raise ImportValidationError(f"Unknown role {role!r}. Use one of: {', '.join(USER_ROLES)}")
        return gateway().update_user(user_id, payload)

    @app.delete("/users/{user_id}")
    def delete_user(user_id: str):
        return gateway().delete_user(numeric_id(user_id))

    # =========================================================================
    # MULTI-ENTITY IMPORT
    # =========================================================================

    @app.post("/import/upload", status_code=201)
    def import_upload(file: Optional[UploadFile] = File(None)):
        extension = check_upload(file.filename if file else None, IMPORT_UPLOAD_EXTENSIONS)
        with saved_upload(file.file, app.state.upload_dir, extension) as path:
            return TransactionImporter(gateway()).import_file(path)

    @app.post("/import/normalize", status_code=201)
    def import_normalize(file: Optional[UploadFile] = File(None)):
        extension = check_upload(file.filename if file else None, IMPORT_UPLOAD_EXTENSIONS)
        with saved_upload(file.file, app.state.upload_dir, extension) as path:
            return Normalizer(app.state.output_dir).normalize_file(path)

    return app


app = create_app()


def main():
    """Print the endpoint list and run the server."""
    print(f"[INFO] Cartera API on http://{API_HOST}:{PORT}")
    for endpoint in ENDPOINTS:
        print(f"[INFO]   {endpoint}")
    uvicorn.run(app, host=API_HOST, port=PORT)


if __name__ == "__main__":
    main()
