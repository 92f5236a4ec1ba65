# =============================================================================
# config/settings.py
# =============================================================================
# PURPOSE:
#   Central configuration file for the entire application.
#   All "magic numbers", constants, and settings live here.
#   This makes it easy to change things without hunting through code.
#
# WHERE DO VALUES COME FROM?
#   1. A .env file next to the app (loaded by python-dotenv), or
#   2. Real environment variables (they win over .env), or
#   3. The defaults written below.
# =============================================================================

import os
from dotenv import load_dotenv

# Read .env into os.environ (does NOT overwrite variables already set)
load_dotenv()


def env_int(name, default):
    """Parse an integer environment variable, falling back to default."""
    try:
        return int(os.getenv(name, str(default)))
    except (ValueError, TypeError):
        return default


def env_float(name, default):
    """Parse a float environment variable, falling back to default."""
    try:
        return float(os.getenv(name, str(default)))
    except (ValueError, TypeError):
        return default


def env_list(name, default_csv=""):
    """Parse a comma-separated environment variable into a list."""
    raw = os.getenv(name, default_csv) or ""
    return [part.strip() for part in raw.split(",") if part.strip()]


# -----------------------------------------------------------------------------
# DATABASE CONFIGURATION
# -----------------------------------------------------------------------------
# SQLite database file path (relative to where you run the server)
DB_PATH = os.getenv("DB_PATH", "cartera.db")

# How many connections the pool keeps open at most
DB_POOL_SIZE = env_int("DB_POOL_SIZE", 5)

# Seconds a request waits for a free connection before giving up
DB_POOL_TIMEOUT = env_float("DB_POOL_TIMEOUT", 10.0)

# -----------------------------------------------------------------------------
# FILE LOCATIONS
# -----------------------------------------------------------------------------
# Uploaded files are written here while they are processed, then deleted
UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")

# Cleaned CSV files written by the normalize endpoint
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "output")

# Extensions accepted by each upload endpoint
CUSTOMER_UPLOAD_EXTENSIONS = [".csv", ".txt"]
IMPORT_UPLOAD_EXTENSIONS = [".csv"]

# Rows pulled from a CSV per pandas chunk (keeps big files out of memory)
CSV_CHUNK_SIZE = 500

# -----------------------------------------------------------------------------
# HTTP SERVER
# -----------------------------------------------------------------------------
API_HOST = os.getenv("API_HOST", "0.0.0.0")
PORT = env_int("PORT", 3000)

# Where the Streamlit frontend finds the API
API_URL = os.getenv("API_URL", f"http://localhost:{PORT}")

# Origins allowed to call the API from a browser ("*" = anyone)
CORS_ORIGINS = env_list("CORS_ORIGINS", "*")

# -----------------------------------------------------------------------------
# USERS
# -----------------------------------------------------------------------------
DEFAULT_USER_ROLE = "member"
USER_ROLES = ["member", "admin", "editor"]

# -----------------------------------------------------------------------------
# TRANSACTION VOCABULARIES
# -----------------------------------------------------------------------------
# Canonical values stored in transactions.status / transactions.type.
# Anything not listed in the lookup tables (importers/vocabulary.py)
# is stored upper-cased as it came.
TRANSACTION_STATUSES = ["PENDING", "COMPLETED", "FAILED"]
TRANSACTION_TYPES = ["INVOICE_PAYMENT"]

# -----------------------------------------------------------------------------
# UI CONFIGURATION
# -----------------------------------------------------------------------------
PAGE_TITLE = "Cartera"
PAGE_ICON = "💳"
LAYOUT = "wide"
