import re
from datetime import datetime, timezone

import pytest

from vendix.services.business import BusinessSettings
from vendix.services.cart import Cart
from vendix.services.catalog import Product
from vendix.services.receipts import (
    line_unit_price,
    receipt_filename,
    render_receipt_html,
    render_receipt_pdf,
    render_receipt_text,
)
from vendix.services.sales import record_sale

NOW = datetime(2026, 3, 14, 15, 9, 26, tzinfo=timezone.utc)


def _sale(conn, settings, *, currency="HTG", method="Cash", discount=0.0, received=10000.0, items=None):
    cart = Cart()
    for p in items or [Product(id="P-1", name="Rice 1kg", price=325.0, stock=10)]:
        cart.add(p)
    return record_sale(
        conn,
        cart=cart,
        settings=settings,
        currency=currency,
        payment_method=method,
        discount=discount,
        amount_received=received,
        now=NOW,
    )


def test_text_receipt_cash(conn, htg_settings):
    sale = _sale(conn, htg_settings, received=500.0)
    text = render_receipt_text(sale, htg_settings)

    assert "VENDIX POS" in text
    assert f"RECEIPT: {sale.id}" in text
    assert "Received:" in text
    assert "Change:" in text
    assert "175.00" in text
    assert "Discount:" not in text
    assert all(len(line) <= 32 for line in text.splitlines())


def test_text_receipt_discount_and_non_cash(conn, htg_settings):
    sale = _sale(conn, htg_settings, method="Virement", discount=25.0)
    text = render_receipt_text(sale, htg_settings)

    assert "Discount:" in text
    assert "-25.00 HTG" in text
    assert "Payment: Virement" in text
    assert "Change:" not in text


def test_line_price_uses_rate_recorded_on_sale(conn):
    sale = _sale(conn, BusinessSettings(default_currency="HTG", conversion_rate=100.0), currency="USD", received=50.0)
    later = BusinessSettings(default_currency="HTG", conversion_rate=150.0)

    assert line_unit_price(sale.items[0], sale, later) == pytest.approx(3.25)


def test_html_receipt_escapes_text(conn, htg_settings):
    sale = _sale(conn, htg_settings, items=[Product(id="P-1", name="<b>Rice</b>", price=10.0, stock=1)])
    page = render_receipt_html(sale, htg_settings)

    assert "&lt;b&gt;Rice&lt;/b&gt;" in page
    assert "window.print()" in page
    assert "window.print()" not in render_receipt_html(sale, htg_settings, auto_print=False)


def test_pdf_receipt(conn, htg_settings):
    sale = _sale(conn, htg_settings)
    pdf = render_receipt_pdf(sale, htg_settings)

    assert pdf.startswith(b"%PDF")
    assert receipt_filename(sale) == f"receipt_{sale.id}.pdf"


def test_pdf_receipt_paginates_long_sales(conn, htg_settings):
    items = [Product(id=f"P-{i}", name=f"Item {i}", price=1.0, stock=1) for i in range(80)]
    sale = _sale(conn, htg_settings, items=items)
    pdf = render_receipt_pdf(sale, htg_settings)

    assert pdf.startswith(b"%PDF")
    counts = [int(n) for n in re.findall(rb"/Count (\d+)", pdf)]
    assert max(counts) >= 2
