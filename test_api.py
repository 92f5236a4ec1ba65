# =============================================================================
# test_api.py - end-to-end through the HTTP API (FastAPI TestClient)
# =============================================================================

import os

from conftest import PAYMENTS_HEADER
from server import GENERIC_ERROR, INVALID_BODY_ERROR

PAYMENTS = PAYMENTS_HEADER + "\n" + "\n".join([
    "TXN001,2024-06-01,100,Completada,Pago de Factura,Ana,1001,,,,Nequi,FAC-1,2024-06,100,100",
    "TXN002,2024-06-02,50,Pendiente,Pago de Factura,Luis,1002,,,,Nequi,FAC-2,2024-06,50,0",
    "TXN003,2024-06-03,70,Pendiente,Pago de Factura,Eva,1003,,,,Nequi,FAC-3,2024-06,70,0",
]) + "\n"


def upload(client, path, filename, content):
    return client.post(path, files={"file": (filename, content.encode("utf-8"), "text/csv")})


def leftover_uploads(dirs):
    if not os.path.isdir(dirs["uploads"]):
        return []
    return os.listdir(dirs["uploads"])


# -----------------------------------------------------------------------------
# HEALTH + CRUD
# -----------------------------------------------------------------------------

def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["ok"] is True
    assert response.json()["timestamp"]


def test_customer_crud(client):
    response = client.post("/customers", json={
        "name": "Ana", "identification_number": "1001", "email": "ana@mail.com",
    })
    assert response.status_code == 201
    customer = response.json()

    response = client.patch(f"/customers/{customer['id']}", json={"name": "Ana María"})
    assert response.status_code == 200
    assert response.json()["name"] == "Ana María"
    assert response.json()["email"] == "ana@mail.com"

    assert [c["name"] for c in client.get("/customers").json()] == ["Ana María"]

    response = client.delete(f"/customers/{customer['id']}")
    assert response.json()["identification_number"] == "1001"
    assert client.get("/customers").json() == []


def test_create_customer_requires_fields(client):
    response = client.post("/customers", json={"name": "Ana"})

    assert response.status_code == 400
    assert "identification_number" in response.json()["error"]


def test_missing_rows_come_back_as_null(client):
    assert client.delete("/customers/999").json() is None
    assert client.patch("/customers/999", json={"name": "X"}).json() is None


def test_malformed_numeric_id_is_400(client):
    assert client.delete("/customers/abc").status_code == 400
    assert client.patch("/invoices/1x", json={}).status_code == 400
    assert client.delete("/users/-1").status_code == 400


def test_id_too_large_for_sqlite_is_400(client):
    response = client.delete("/customers/99999999999999999999")

    assert response.status_code == 400
    assert "Invalid id" in response.json()["error"]
    assert client.patch("/users/9223372036854775808", json={}).status_code == 400


def test_missing_or_non_object_body_is_400(client):
    missing = client.post("/customers")
    not_an_object = client.patch("/customers/1", json=["x"])
    not_json = client.post(
        "/customers", content="{oops", headers={"Content-Type": "application/json"}
    )

    for response in (missing, not_an_object, not_json):
        assert response.status_code == 400
        assert response.json() == {"error": INVALID_BODY_ERROR}


def test_storage_error_is_generic_500(client):
    body = {"name": "Ana", "identification_number": "1001"}
    client.post("/customers", json=body)

    response = client.post("/customers", json=body)

    assert response.status_code == 500
    assert response.json() == {"error": GENERIC_ERROR}


def test_invoice_and_transaction_crud(client):
    customer = client.post("/customers", json={"name": "Ana", "identification_number": "1001"}).json()

    invoice = client.post("/invoices", json={
        "invoice_number": "FAC-1", "customer_id": customer["id"], "invoiced_amount": 100,
    }).json()
    assert client.post("/invoices", json={"invoice_number": "FAC-2"}).status_code == 400

    response = client.post("/transactions", json={
        "transaction_id": "TXN-A", "invoice_id": invoice["id"], "status": "PENDING",
    })
    assert response.status_code == 201

    response = client.patch("/transactions/TXN-A", json={"status": "COMPLETED"})
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["invoice_id"] == invoice["id"]

    assert client.delete("/transactions/TXN-A").json()["transaction_id"] == "TXN-A"
    assert client.delete("/transactions/TXN-A").json() is None
    assert client.delete(f"/invoices/{invoice['id']}").json()["invoice_number"] == "FAC-1"


def test_users(client):
    response = client.post("/users", json={"username": "ana"})
    assert response.status_code == 201
    user = response.json()
    assert user["role"] == "member"

    assert client.post("/users", json={"username": "luis", "role": "owner"}).status_code == 400
    assert client.post("/users", json={"role": "admin"}).status_code == 400

    response = client.patch(f"/users/{user['id']}", json={"role": "admin"})
    assert response.json()["role"] == "admin"
    assert response.json()["username"] == "ana"


# -----------------------------------------------------------------------------
# LEGACY CUSTOMER UPLOAD
# -----------------------------------------------------------------------------

def test_customer_upload_drops_row_without_id(client, dirs):
    content = "nombre,numero_identificacion\nAna,1001\nSin Id,\nLuis,1002\n"

    response = upload(client, "/customers/upload", "clientes.csv", content)

    assert response.status_code == 201
    assert response.json()["customers"] == 2
    assert len(client.get("/customers").json()) == 2
    assert leftover_uploads(dirs) == []


def test_customer_upload_txt(client):
    response = upload(client, "/customers/upload", "ids.txt", "1001\n1002\n")

    assert response.status_code == 201
    assert response.json()["customers"] == 2


def test_upload_rejects_unsupported_extension(client):
    response = upload(client, "/customers/upload", "clientes.xlsx", "x")

    assert response.status_code == 400
    assert "error" in response.json()


def test_upload_without_file_is_400(client):
    response = client.post("/customers/upload", data={"note": "no file"})

    assert response.status_code == 400


def test_upload_without_valid_rows_is_400_and_cleans_up(client, dirs):
    response = upload(client, "/customers/upload", "clientes.csv", "nombre,numero_identificacion\n")

    assert response.status_code == 400
    assert leftover_uploads(dirs) == []


# -----------------------------------------------------------------------------
# MULTI-ENTITY IMPORT
# -----------------------------------------------------------------------------

def test_import_upload(client, dirs):
    response = upload(client, "/import/upload", "pagos.csv", PAYMENTS)

    assert response.status_code == 201
    body = response.json()
    assert (body["customers"], body["invoices"], body["transactions"]) == (3, 3, 3)
    assert len(client.get("/transactions").json()) == 3
    assert leftover_uploads(dirs) == []


def test_import_upload_only_accepts_csv(client):
    assert upload(client, "/import/upload", "pagos.txt", PAYMENTS).status_code == 400


def test_import_aborts_on_bad_row_and_keeps_earlier_rows(client, dirs):
    lines = PAYMENTS.splitlines()
    lines[2] = lines[2].replace(",1002,", ",,")

    response = upload(client, "/import/upload", "pagos.csv", "\n".join(lines) + "\n")

    assert response.status_code == 500
    assert response.json() == {"error": GENERIC_ERROR}
    assert [c["identification_number"] for c in client.get("/customers").json()] == ["1001"]
    assert [t["transaction_id"] for t in client.get("/transactions").json()] == ["TXN001"]
    assert leftover_uploads(dirs) == []


def test_import_normalize_writes_file(client, dirs):
    content = PAYMENTS + "TXN001,2024-06-09,300,Completada,Pago de Factura,Ana,1001,,,,Nequi,FAC-1,2024-06,300,300\n"

    response = upload(client, "/import/normalize", "pagos.csv", content)

    assert response.status_code == 201
    body = response.json()
    assert body["records"] == 3
    assert os.path.isfile(os.path.join(dirs["output"], body["filename"]))
    # Nothing was imported
    assert client.get("/transactions").json() == []
