# =============================================================================
# utils/__init__.py
# =============================================================================
# PURPOSE:
#   Makes the utils folder a Python package and provides easy imports.
#
# WHAT ARE UTILS?
#   "Utils" is short for "utilities" - helpers that don't belong to one
#   feature:
#   - uploads: temp-file handling for the upload endpoints
#   - api_client: how the Streamlit pages reach the REST API
# =============================================================================

from .uploads import check_upload, saved_upload
