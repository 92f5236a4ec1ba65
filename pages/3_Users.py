# =============================================================================
# pages/3_Users.py
# =============================================================================
# PURPOSE:
#   Manage the people who use the app (username + role).
# =============================================================================

import streamlit as st

from config import DEFAULT_USER_ROLE, LAYOUT, PAGE_TITLE, USER_ROLES
from utils import api_client
from utils.api_client import ApiError

st.set_page_config(
    page_title=f"Users - {PAGE_TITLE}",
    page_icon="🔑",
    layout=LAYOUT,
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_client():
    return api_client.get_client()


client = get_client()

st.title("Users")

users = api_client.list_items(client, "users")

if users:
    st.dataframe(api_client.to_frame(users), use_container_width=True, hide_index=True)
else:
    st.info("No users yet")

# -----------------------------------------------------------------------------
# CREATE
# -----------------------------------------------------------------------------
st.write("### New user")
with st.form("create_user", clear_on_submit=True):
    col1, col2 = st.columns([3, 1])
    with col1:
        username = st.text_input("Username *")
    with col2:
        role = st.selectbox("Role", USER_ROLES, index=USER_ROLES.index(DEFAULT_USER_ROLE))

    if st.form_submit_button("Create", type="primary"):
        try:
            api_client.create_item(client, "users", {"username": username, "role": role})
            st.success(f"User {username} created")
            st.rerun()
        except ApiError as e:
            st.error(str(e))

# -----------------------------------------------------------------------------
# EDIT / DELETE
# -----------------------------------------------------------------------------
if users:
    st.write("### Edit or delete")
    options = {f"#{u['id']} - {u['username']} ({u['role']})": u for u in users}
    selected = options[st.selectbox("User", list(options))]

    col1, col2, col3 = st.columns([2, 1, 1])
    with col1:
        new_role = st.selectbox("New role", USER_ROLES, index=USER_ROLES.index(selected["role"]) if selected["role"] in USER_ROLES else 0)
    with col2:
        if st.button("Save role", use_container_width=True):
            try:
                api_client.update_item(client, "users", selected["id"], {"role": new_role})
                st.rerun()
            except ApiError as e:
                st.error(str(e))
    with col3:
        if st.button("Delete user", use_container_width=True):
            try:
                api_client.delete_item(client, "users", selected["id"])
                st.rerun()
            except ApiError as e:
                st.error(str(e))
