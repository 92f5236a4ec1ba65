# =============================================================================
# app.py - FRONTEND ENTRY POINT
# =============================================================================
# PURPOSE:
#   The Streamlit frontend for the Cartera API.
#   When you run `streamlit run app.py`, this file executes first.
#
# WHAT IT DOES:
#   1. Configures the Streamlit page (title, icon, layout)
#   2. Redirects to the Customers page
#
# THE FRONTEND NEVER OPENS THE DATABASE:
#   Every page goes through utils/api_client.py to the REST API, so the
#   API server (server.py) must be running:
#       cartera-api
#       streamlit run app.py
#   Point the pages at another server with API_URL in .env.
# =============================================================================

import streamlit as st

from config import LAYOUT, PAGE_ICON, PAGE_TITLE

# -----------------------------------------------------------------------------
# PAGE CONFIGURATION
# -----------------------------------------------------------------------------
# This MUST be the first Streamlit command in the script!

st.set_page_config(
    page_title=PAGE_TITLE,
    page_icon=PAGE_ICON,
    layout=LAYOUT
)

# -----------------------------------------------------------------------------
# REDIRECT TO CUSTOMERS
# -----------------------------------------------------------------------------

st.switch_page("pages/1_Customers.py")
