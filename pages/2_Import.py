# =============================================================================
# pages/2_Import.py
# =============================================================================
# PURPOSE:
#   Data import page - this is where files enter the system.
#
# WHAT IT DOES:
#   1. Customer Import (CSV or TXT, customers only)
#   2. Transaction Import (CSV: customer + invoice + transaction per row)
#   3. Normalize (CSV cleaned and deduplicated into the server's output
#      folder; nothing is written to the database)
#
# DUPLICATES:
#   - Customers: same identification number → name refreshed
#   - Invoices: same invoice number → invoiced amount updated
#   - Transactions: same transaction id → row ignored
# =============================================================================

import streamlit as st

from config import LAYOUT, PAGE_TITLE
from utils import api_client
from utils.api_client import ApiError

# -----------------------------------------------------------------------------
# PAGE CONFIGURATION
# -----------------------------------------------------------------------------
st.set_page_config(
    page_title=f"Import Data - {PAGE_TITLE}",
    page_icon="📥",
    layout=LAYOUT,
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_client():
    return api_client.get_client()


client = get_client()


def run_upload(path, uploaded_file, spinner_text):
    """Send the file to the API and show the server's answer."""
    with st.spinner(spinner_text):
        try:
            result = api_client.upload_file(client, path, uploaded_file.name, uploaded_file.getvalue())
        except ApiError as e:
            st.error(f"Import error: {e}")
            return None
    st.success(result.get("message", "Done"))
    return result


# -----------------------------------------------------------------------------
# PAGE HEADER
# -----------------------------------------------------------------------------
st.title("Import Data")
st.caption("Upload customer lists and payment exports")

# -----------------------------------------------------------------------------
# SECTION 1: CUSTOMER IMPORT
# -----------------------------------------------------------------------------
st.write("---")
st.write("### Customer Import")
st.write("A CSV of customers, or a TXT with one identification number per line.")

with st.expander("Expected Format", expanded=False):
    st.code("""
nombre,numero_identificacion,direccion,telefono,correo
Ana Pérez,1001,Calle 1,3001234567,ana@mail.com
Luis Gómez,1002,Calle 2,3007654321,luis@mail.com
    """, language="csv")
    st.caption("Rows without a numeric identification number are skipped")

customer_file = st.file_uploader(
    "Choose customer CSV/TXT file",
    type=["csv", "txt"],
    key="customer_upload"
)

if customer_file is not None:
    if st.button("Import Customers", type="primary", use_container_width=True):
        result = run_upload("/customers/upload", customer_file, "Importing customers...")
        if result and result.get("skipped"):
            st.info(f"Skipped {result['skipped']} rows without a valid identification number")

# -----------------------------------------------------------------------------
# SECTION 2: TRANSACTION IMPORT
# -----------------------------------------------------------------------------
st.write("---")
st.write("### Transaction Import")
st.write("A payments export: every row holds a customer, an invoice and a transaction.")

with st.expander("Expected Format", expanded=False):
    st.code("""
id_transaccion,fecha_transaccion,monto_transaccion,estado_transaccion,tipo_transaccion,nombre,numero_identificacion,direccion,telefono,correo,plataforma,numero_factura,periodo_facturacion,monto_facturado,monto_pagado
TXN001,2024-06-01 10:00:00,150000,Completada,Pago de Factura,Ana Pérez,1001,Calle 1,3001234567,ana@mail.com,Nequi,FAC-001,2024-06,180000,150000
    """, language="csv")
    st.caption("The import stops at the first row that cannot be saved; earlier rows are kept")

transaction_file = st.file_uploader(
    "Choose transactions CSV file",
    type=["csv"],
    key="transaction_upload"
)

if transaction_file is not None:
    if st.button("Import Transactions", type="primary", use_container_width=True):
        result = run_upload("/import/upload", transaction_file, "Importing transactions...")
        if result:
            col1, col2, col3 = st.columns(3)
            with col1:
                st.metric("New customers", result["customers"])
            with col2:
                st.metric("New invoices", result["invoices"])
            with col3:
                st.metric("Transactions processed", result["transactions"])

# -----------------------------------------------------------------------------
# SECTION 3: NORMALIZE ONLY
# -----------------------------------------------------------------------------
st.write("---")
st.write("### Normalize")
st.write("Clean a payments export without importing it. One row per transaction id is kept (the last one).")

normalize_file = st.file_uploader(
    "Choose transactions CSV file",
    type=["csv"],
    key="normalize_upload"
)

if normalize_file is not None:
    if st.button("Normalize File", use_container_width=True):
        result = run_upload("/import/normalize", normalize_file, "Normalizing...")
        if result:
            st.info(f"{result['records']} records written to {result['filename']} on the server")
