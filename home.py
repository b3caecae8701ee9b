from __future__ import annotations

import streamlit as st

from vendix.config import get_settings
from vendix.db import get_conn, ensure_schema
from vendix.services.business import load_business_settings
from vendix.services.catalog import list_products
from vendix.services.pricing import format_money
from vendix.services.sales import list_sales, sales_stats
from vendix.utils import iso_today, local_day

st.set_page_config(page_title="Vendix POS", page_icon="🧾", layout="wide")

settings = get_settings()
conn = get_conn(settings.db_path)
ensure_schema(conn)
business = load_business_settings(conn)

st.title(f"🧾 {business.name}")
st.caption("Offline point of sale: catalog, checkout in USD or HTG, receipts and sales history.")

products = list_products(conn)
today = sales_stats([s for s in list_sales(conn) if local_day(s.date) == iso_today()])

c1, c2, c3, c4 = st.columns(4)
c1.metric("Products", f"{len(products)}")
c2.metric("Low stock (< 5)", f"{sum(1 for p in products if p.stock < 5)}")
c3.metric("Sales today (HTG)", format_money(today["total_htg"], "HTG"))
c4.metric("Sales today (USD)", format_money(today["total_usd"], "USD"))

status = st.session_state.get("license_status")
if status is not None and status.valid:
    st.caption(status.message)

with st.sidebar:
    st.subheader("Environment")
    st.write(f"**Data directory:** `{settings.data_dir}`")
    st.write(f"**Database:** `{settings.db_path.name}`")

st.info(
    "Use the left sidebar navigation. Add products in **📦 Stock** (or load demo products in **🧪 Data Management**), then sell from **🛒 Point of Sale**.",
    icon="ℹ️",
)
