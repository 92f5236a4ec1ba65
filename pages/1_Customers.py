# =============================================================================
# pages/1_Customers.py
# =============================================================================
# PURPOSE:
#   Browse and edit customers, and look at their invoices and transactions.
#
# FEATURES:
#   - Customers table + create / edit / delete
#   - Invoices table
#   - Transactions table (with status filter)
#
# EDITING:
#   Edits are PARTIAL: a field left empty keeps its stored value.
# =============================================================================

import streamlit as st

from config import LAYOUT, PAGE_TITLE, TRANSACTION_STATUSES
from utils import api_client
from utils.api_client import ApiError

# -----------------------------------------------------------------------------
# PAGE CONFIGURATION
# -----------------------------------------------------------------------------
st.set_page_config(
    page_title=f"Customers - {PAGE_TITLE}",
    page_icon="👥",
    layout=LAYOUT,
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_client():
    return api_client.get_client()


client = get_client()

if not api_client.check_health(client):
    st.error("The API is not reachable. Start it with `cartera-api` and reload.")
    st.stop()

# -----------------------------------------------------------------------------
# PAGE HEADER
# -----------------------------------------------------------------------------
st.title("Customers")
st.caption("Customers, their invoices and the payments made against them")

customers = api_client.list_items(client, "customers")
invoices = api_client.list_items(client, "invoices")
transactions = api_client.list_items(client, "transactions")

col1, col2, col3 = st.columns(3)
with col1:
    st.metric("Customers", len(customers))
with col2:
    st.metric("Invoices", len(invoices))
with col3:
    st.metric("Transactions", len(transactions))

tab_customers, tab_invoices, tab_transactions = st.tabs(
    ["Customers", "Invoices", "Transactions"]
)

# -----------------------------------------------------------------------------
# TAB 1: CUSTOMERS
# -----------------------------------------------------------------------------
with tab_customers:
    if customers:
        st.dataframe(api_client.to_frame(customers), use_container_width=True, hide_index=True)
    else:
        st.info("No customers yet. Create one below or import a file.")

    st.write("### New customer")
    with st.form("create_customer", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            name = st.text_input("Name *")
            identification_number = st.text_input("Identification number *")
            address = st.text_input("Address")
        with col2:
            phone = st.text_input("Phone")
            email = st.text_input("Email")

        if st.form_submit_button("Create", type="primary"):
            try:
                created = api_client.create_item(client, "customers", {
                    "name": name,
                    "identification_number": identification_number,
                    "address": address or None,
                    "phone": phone or None,
                    "email": email or None,
                })
                st.success(f"Customer #{created['id']} created")
                st.rerun()
            except ApiError as e:
                st.error(str(e))

    if customers:
        st.write("### Edit or delete")
        options = {f"#{c['id']} - {c['name'] or ''} ({c['identification_number']})": c for c in customers}
        selected = options[st.selectbox("Customer", list(options))]

        with st.form("edit_customer"):
            col1, col2 = st.columns(2)
            with col1:
                new_name = st.text_input("Name", placeholder=selected["name"] or "")
                new_address = st.text_input("Address", placeholder=selected["address"] or "")
            with col2:
                new_phone = st.text_input("Phone", placeholder=selected["phone"] or "")
                new_email = st.text_input("Email", placeholder=selected["email"] or "")

            col1, col2 = st.columns(2)
            with col1:
                save = st.form_submit_button("Save changes", use_container_width=True)
            with col2:
                delete = st.form_submit_button("Delete customer", use_container_width=True)

        try:
            if save:
                # Empty inputs are sent as null, which keeps the stored value
                api_client.update_item(client, "customers", selected["id"], {
                    "name": new_name or None,
                    "address": new_address or None,
                    "phone": new_phone or None,
                    "email": new_email or None,
                })
                st.success("Customer updated")
                st.rerun()
            if delete:
                api_client.delete_item(client, "customers", selected["id"])
                st.success("Customer deleted (with their invoices and transactions)")
                st.rerun()
        except ApiError as e:
            st.error(str(e))

# -----------------------------------------------------------------------------
# TAB 2: INVOICES
# -----------------------------------------------------------------------------
with tab_invoices:
    if invoices:
        df = api_client.to_frame(invoices)
        st.dataframe(df, use_container_width=True, hide_index=True)

        col1, col2 = st.columns(2)
        with col1:
            st.metric("Total invoiced", f"{df['invoiced_amount'].fillna(0).sum():,.2f}")
        with col2:
            st.metric("Total paid", f"{df['paid_amount'].fillna(0).sum():,.2f}")
    else:
        st.info("No invoices yet. Import a transactions file first.")

# -----------------------------------------------------------------------------
# TAB 3: TRANSACTIONS
# -----------------------------------------------------------------------------
with tab_transactions:
    if transactions:
        status = st.selectbox("Status", ["All"] + TRANSACTION_STATUSES)
        df = api_client.to_frame(transactions)
        if status != "All":
            df = df[df["status"] == status]
        st.write(f"{len(df)} transactions shown")
        st.dataframe(df, use_container_width=True, hide_index=True)
    else:
        st.info("No transactions yet. Import a transactions file first.")
