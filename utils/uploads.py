# =============================================================================
# utils/uploads.py
# =============================================================================
# PURPOSE:
#   Gets an uploaded file onto disk for the importers, and makes sure it is
#   gone again afterwards.
#
# THE RULE:
#   The temporary copy is deleted on EVERY way out: success, validation
#   error, row failure, database error. If the delete itself fails we print
#   a warning and carry on; the caller's result is not changed by it.
# =============================================================================

import os
import shutil
import tempfile
from contextlib import contextmanager

from importers.errors import ImportValidationError


def check_upload(filename, allowed_extensions):
    """
    Validate the uploaded file name and return its lower-cased extension.

    PARAMETERS:
        filename (str | None): name the client sent ("clientes.CSV")
        allowed_extensions (list): e.g. [".csv", ".txt"]

    RETURNS:
        str: the extension, e.g. ".csv"

    RAISES:
        ImportValidationError: no file, or an extension not in the list
    """
    if not filename:
        raise ImportValidationError("No file uploaded.")

    extension = os.path.splitext(filename)[1].lower()
    if extension not in allowed_extensions:
        allowed = " or ".join(ext.lstrip(".").upper() for ext in allowed_extensions)
        raise ImportValidationError(f"Unsupported file format. Use {allowed}.")

    return extension


@contextmanager
def saved_upload(source, upload_dir, suffix=""):
    """
    Copy an uploaded file object to a temp file; yield its path; delete it.

    USAGE:
        with saved_upload(upload.file, "uploads", ".csv") as path:
            CustomerImporter(gateway, path, ".csv").import_customers()
        # the temp file no longer exists here, whatever happened inside
    """
    os.makedirs(upload_dir, exist_ok=True)

    with tempfile.NamedTemporaryFile(dir=upload_dir, suffix=suffix, delete=False) as tmp:
        path = tmp.name
        try:
            shutil.copyfileobj(source, tmp)
        except BaseException:
            tmp.close()
            _remove(path)
            raise

    try:
        yield path
    finally:
        _remove(path)


def _remove(path):
    try:
        os.remove(path)
    except OSError as e:
        print(f"[WARN] Could not delete temp file {path}: {e}")
