# =============================================================================
# conftest.py - shared pytest fixtures
# =============================================================================
# Every test gets its OWN SQLite file under pytest's tmp_path, so tests never
# see each other's data and never touch cartera.db.
#
# RUN THE TESTS:
#   pytest
# =============================================================================

import pytest
from fastapi.testclient import TestClient

from database import ConnectionPool, StorageGateway, init_db
from server import create_app

# Header of the payments export used across the tests (Spanish, as exported)
PAYMENTS_HEADER = (
    "id_transaccion,fecha_transaccion,monto_transaccion,estado_transaccion,"
    "tipo_transaccion,nombre,numero_identificacion,direccion,telefono,correo,"
    "plataforma,numero_factura,periodo_facturacion,monto_facturado,monto_pagado"
)


@pytest.fixture
def pool(tmp_path):
    pool = ConnectionPool(str(tmp_path / "test.db"), size=2, timeout=0.5)
    init_db(pool)
    yield pool
    pool.close()


@pytest.fixture
def gateway(pool):
    return StorageGateway(pool)


@pytest.fixture
def write_file(tmp_path):
    """write_file("a.csv", "text") → path of a new file in tmp_path."""
    def _write(name, content, encoding="utf-8"):
        path = tmp_path / name
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode(encoding))
        return str(path)
    return _write


@pytest.fixture
def dirs(tmp_path):
    return {
        "db": str(tmp_path / "api.db"),
        "uploads": str(tmp_path / "uploads"),
        "output": str(tmp_path / "output"),
    }


@pytest.fixture
def client(dirs):
    app = create_app(db_path=dirs["db"], upload_dir=dirs["uploads"], output_dir=dirs["output"])
    # 500 responses are asserted on, not re-raised into the test
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
