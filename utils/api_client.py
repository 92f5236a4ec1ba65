# =============================================================================
# utils/api_client.py
# =============================================================================
# PURPOSE:
#   The only place the Streamlit pages talk to the REST API.
#   Pages call these functions instead of building URLs themselves.
#
# CLIENT:
#   Every function takes an httpx.Client. get_client() builds one pointing at
#   API_URL; tests pass a FastAPI TestClient (which is an httpx.Client too).
#
# ERRORS:
#   Any non-2xx answer raises ApiError carrying the server's {"error": ...}
#   message, so a page can simply show str(e).
# =============================================================================

import httpx
import pandas as pd

from config import API_URL


class ApiError(Exception):
    """The API answered with an error status."""

    def __init__(self, status_code, message):
        self.status_code = status_code
        super().__init__(message)


def get_client(base_url=None, timeout=30.0):
    """Create an httpx client for the API."""
    return httpx.Client(base_url=base_url or API_URL, timeout=timeout)


def to_frame(rows):
    """List of row dicts → DataFrame for st.dataframe (empty list → empty frame)."""
    return pd.DataFrame(rows)


def _unwrap(response):
    if response.is_success:
        return response.json()

    try:
        message = response.json().get("error") or response.text
    except ValueError:
        message = response.text
    raise ApiError(response.status_code, message)


# -----------------------------------------------------------------------------
# GENERIC CRUD
# -----------------------------------------------------------------------------

def list_items(client, resource):
    """GET /<resource> → list of dicts."""
    return _unwrap(client.get(f"/{resource}"))


def create_item(client, resource, data):
    """POST /<resource> → the created row."""
    return _unwrap(client.post(f"/{resource}", json=data))


def update_item(client, resource, item_id, data):
    """
    PATCH /<resource>/<id> → the updated row, or None if it does not exist.

    Only the keys present in `data` with a non-None value are changed.
    """
    return _unwrap(client.patch(f"/{resource}/{item_id}", json=data))


def delete_item(client, resource, item_id):
    """DELETE /<resource>/<id> → the deleted row, or None if it did not exist."""
    return _unwrap(client.delete(f"/{resource}/{item_id}"))


# -----------------------------------------------------------------------------
# UPLOADS
# -----------------------------------------------------------------------------

def upload_file(client, path, filename, content):
    """
    POST a file to one of the upload endpoints.

    PARAMETERS:
        path (str): "/customers/upload", "/import/upload" or "/import/normalize"
        filename (str): name sent to the server (its extension matters)
        content (bytes): file contents

    RETURNS:
        dict: the server's summary, e.g. {"message": ..., "customers": 2}
    """
    files = {"file": (filename, content, "text/csv")}
    return _unwrap(client.post(path, files=files))


def check_health(client):
    """True when the API answers /health."""
    try:
        return bool(_unwrap(client.get("/health")).get("ok"))
    except (httpx.HTTPError, ApiError) as e:
        print(f"[WARN] API health check failed: {e}")
        return False
