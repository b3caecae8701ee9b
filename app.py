from __future__ import annotations

import logging

import streamlit as st

from vendix.components import reset_checkout
from vendix.config import get_settings
from vendix.db import get_conn, ensure_schema
from vendix.services.auth import get_user, is_session_active, sign_out
from vendix.services.business import load_business_settings, theme_css
from vendix.services.license import check_stored_license, needs_expiry_warning
from vendix.services.pricing import Currency, symbol

st.set_page_config(page_title="Vendix POS", page_icon="🧾", layout="wide")

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

conn = get_conn(settings.db_path)
ensure_schema(conn)

business = load_business_settings(conn)
st.markdown(theme_css(business.primary_color), unsafe_allow_html=True)

license_status = check_stored_license(conn)
st.session_state["license_status"] = license_status


@st.dialog("License expiring soon")
def _expiry_notice(status) -> None:
    st.warning(
        f"Your license expires on **{status.expiry_display}** "
        f"({status.days_remaining} day(s) left). Contact support@vendix.com to renew."
    )
    if st.button("OK", type="primary"):
        st.rerun()


pos_page = None
if not license_status.valid:
    pages = [st.Page("activate.py", title="Activate license", icon="🔑")]
elif not is_session_active(conn):
    pages = [st.Page("login.py", title="Sign in", icon="🔐")]
else:
    # Once per app load (browser session); not remembered across loads.
    if needs_expiry_warning(license_status) and not st.session_state.get("expiry_notice_shown"):
        st.session_state["expiry_notice_shown"] = True
        _expiry_notice(license_status)

    if "active_currency" not in st.session_state:
        st.session_state["active_currency"] = business.default_currency

    with st.sidebar:
        st.subheader(business.name)
        st.radio(
            "Display currency",
            options=[c.value for c in Currency],
            format_func=lambda c: f"{symbol(c)} {c}",
            horizontal=True,
            key="active_currency",
            on_change=reset_checkout,
        )
        st.caption(f"1 USD = {business.conversion_rate:,.2f} HTG")
        user = get_user(conn)
        if user is not None:
            st.caption(f"Signed in as **{user.username}**")
        if st.button("Sign out", use_container_width=True):
            sign_out(conn)
            reset_checkout()
            st.rerun()

    pos_page = st.Page("pages/1_🛒_Sales.py", title="Point of Sale", icon="🛒")
    pages = [
        st.Page("home.py", title="Home", icon="🏠"),
        pos_page,
        st.Page("pages/2_📦_Inventory.py", title="Stock", icon="📦"),
        st.Page("pages/3_🧾_History.py", title="Sales History", icon="🧾"),
        st.Page("pages/4_⚙️_Settings.py", title="Settings", icon="⚙️"),
        st.Page("pages/5_🧪_Data_Management.py", title="Data Management", icon="🧪"),
    ]

page = st.navigation(pages)
# The cart lives only while the POS page is on screen.
if pos_page is None or page.url_path != pos_page.url_path:
    reset_checkout()
page.run()
