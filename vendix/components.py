from __future__ import annotations

import streamlit as st
import streamlit.components.v1 as components

from vendix.services.receipts import (
    receipt_filename,
    render_receipt_html,
    render_receipt_pdf,
    render_receipt_text,
)
from vendix.services.sales import Checkout
from vendix.utils import decode_data_uri

CHECKOUT_KEY = "checkout"
PAYMENT_INPUT_KEYS = ("pos_discount", "pos_received")


def get_checkout(state=None) -> Checkout:
    state = st.session_state if state is None else state
    if CHECKOUT_KEY not in state:
        state[CHECKOUT_KEY] = Checkout()
    return state[CHECKOUT_KEY]


def reset_payment_inputs(state=None) -> None:
    state = st.session_state if state is None else state
    for k in PAYMENT_INPUT_KEYS:
        state.pop(k, None)


def reset_checkout(state=None) -> None:
    """
    Drops the cart, any pending QR payment and the last receipt. Runs when the
    display currency changes and whenever a page other than the POS is shown.
    """
    state = st.session_state if state is None else state
    state.pop(CHECKOUT_KEY, None)
    reset_payment_inputs(state)


def receipt_panel(sale, settings, *, key: str) -> None:
    """Receipt preview with print and PDF actions (Sales and History pages)."""
    logo = decode_data_uri(settings.logo)
    if logo:
        st.image(logo, width=120)

    st.code(render_receipt_text(sale, settings), language=None)

    c1, c2 = st.columns(2)
    with c1:
        print_now = st.button("🖨️ Print", key=f"{key}_print", use_container_width=True)
    with c2:
        st.download_button(
            "📄 PDF",
            data=render_receipt_pdf(sale, settings),
            file_name=receipt_filename(sale),
            mime="application/pdf",
            key=f"{key}_pdf",
            use_container_width=True,
        )

    if print_now:
        # The browser print dialog is opened from inside the component frame.
        components.html(render_receipt_html(sale, settings), height=600, scrolling=True)
