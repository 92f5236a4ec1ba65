# =============================================================================
# config/__init__.py
# =============================================================================
# PURPOSE:
#   This file makes the 'config' folder a Python package.
#   It also provides convenient imports so other files can do:
#       from config import DB_PATH, UPLOAD_DIR
#   Instead of:
#       from config.settings import DB_PATH, UPLOAD_DIR
# =============================================================================

from .settings import *
