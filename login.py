from __future__ import annotations

import streamlit as st

from vendix.config import get_settings
from vendix.db import get_conn, ensure_schema
from vendix.services.auth import get_user, sign_in

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)

existing = get_user(conn)
is_signup = existing is None

_, mid, _ = st.columns([1, 2, 1])
with mid:
    st.title("🧾 Vendix POS")
    st.caption("Sell faster, sell smarter.")
    st.subheader("Set up the system" if is_signup else "Sign in to your workspace")

    with st.form("login_form"):
        username = st.text_input("Username", placeholder="admin")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button(
            "Create my account" if is_signup else "Sign in",
            type="primary",
            use_container_width=True,
        )

    if submitted:
        try:
            sign_in(conn, username, password)
            st.rerun()
        except Exception as e:
            st.error(str(e))

    st.caption("Local system • Works offline")
