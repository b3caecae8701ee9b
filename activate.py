from __future__ import annotations

import streamlit as st

from vendix.config import get_settings
from vendix.db import get_conn, ensure_schema
from vendix.services.license import REASON_NO_KEY, activate_license

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)

_, mid, _ = st.columns([1, 2, 1])
with mid:
    st.title("🔑 Vendix")
    st.caption("Enter your license key to use the application.")

    current = st.session_state.get("license_status")
    if current is not None and current.reason not in (None, REASON_NO_KEY):
        st.error(current.message)

    with st.form("license_form"):
        key = st.text_input("License key", placeholder="VENDIX-XXXXXXXX-XXXX")
        submitted = st.form_submit_button("Activate my license", type="primary", use_container_width=True)

    if submitted:
        status = activate_license(conn, key)
        if status.valid:
            st.success(status.message)
            st.rerun()
        else:
            st.error(status.message)

    st.divider()
    st.caption("No key yet? Contact support: **support@vendix.com**")
