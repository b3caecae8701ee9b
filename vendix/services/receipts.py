from __future__ import annotations

import html
from io import BytesIO

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from vendix.services.pricing import Currency, symbol
from vendix.utils import to_local

RECEIPT_TEXT_WIDTH = 32  # characters on 58mm thermal paper
PDF_PAGE_WIDTH_MM = 80
PDF_PAGE_HEIGHT_MM = 200
PDF_MARGIN_MM = 5
PDF_BOTTOM_LIMIT_MM = 190
PDF_ITEM_NAME_CHARS = 20


def line_unit_price(item, sale, settings) -> float:
    """
    Unit price of a sold line in the sale's currency, using the rate recorded
    on the sale rather than the current one.
    """
    if sale.currency == str(settings.default_currency):
        return item.price
    if sale.currency == Currency.USD.value:
        return item.price / sale.rate
    return item.price * sale.rate


def line_amount(item, sale, settings) -> float:
    return line_unit_price(item, sale, settings) * item.quantity


def display_date(iso_ts: str) -> str:
    dt = to_local(iso_ts)
    if dt is None:
        return str(iso_ts)
    return dt.strftime("%d/%m/%Y %H:%M")


def receipt_filename(sale) -> str:
    return f"receipt_{sale.id}.pdf"


# -------------------------
# Thermal text
# -------------------------

def _center(text: str, width: int) -> str:
    return str(text)[:width].center(width).rstrip()


def _columns(left: str, right: str, width: int) -> str:
    right = str(right)
    room = max(width - len(right) - 1, 1)
    return f"{str(left)[:room]:<{room}} {right}"


def render_receipt_text(sale, settings, width: int = RECEIPT_TEXT_WIDTH) -> str:
    sym = symbol(sale.currency)
    rule = "-" * width
    lines = [
        _center(settings.name.upper(), width),
        _center(settings.address, width),
        _center(f"Tel: {settings.phone}", width),
        rule,
        f"RECEIPT: {sale.id}",
        f"DATE: {display_date(sale.date)}",
        rule,
    ]

    for item in sale.items:
        lines.append(str(item.name)[:width])
        lines.append(_columns(f"  x{item.quantity}", f"{line_amount(item, sale, settings):,.2f}", width))

    lines.append(rule)
    lines.append(_columns("Subtotal:", f"{sale.subtotal:,.2f} {sale.currency}", width))
    if sale.discount > 0:
        lines.append(_columns("Discount:", f"-{sale.discount:,.2f} {sale.currency}", width))
    lines.append(_columns("TOTAL:", f"{sale.total:,.2f} {sym}", width))
    lines.append(rule)
    lines.append(f"Payment: {sale.payment_method}")
    if sale.is_cash:
        lines.append(_columns("Received:", f"{sale.amount_received:,.2f}", width))
        lines.append(_columns("Change:", f"{sale.change:,.2f}", width))
    lines.append("")
    lines.append(_center(f"*** {settings.thank_you_message} ***", width))
    return "\n".join(lines) + "\n"


# -------------------------
# Printable HTML
# -------------------------

_PRINT_CSS = """
body { font-family: 'Courier New', Courier, monospace; font-size: 12px; width: 72mm;
       margin: 0 auto; padding: 5mm; color: black; }
.header { text-align: center; margin-bottom: 10px; }
.logo { max-height: 40px; margin-bottom: 5px; }
.title { font-size: 16px; font-weight: bold; margin: 0; text-transform: uppercase; }
.divider { border-top: 1px dashed black; margin: 10px 0; }
table { width: 100%; border-collapse: collapse; }
.row { display: flex; justify-content: space-between; }
.totals { margin-top: 10px; font-weight: bold; }
.grand { font-size: 14px; margin-top: 5px; border-top: 1px solid black; padding-top: 5px; }
.footer { text-align: center; margin-top: 20px; font-style: italic; font-size: 10px; }
@media print { body { margin: 0; padding: 5mm; } }
"""


def render_receipt_html(sale, settings, *, auto_print: bool = True) -> str:
    """
    Fixed 72mm page for the browser print dialog. With `auto_print` the page
    prints itself shortly after loading and then closes.
    """
    e = html.escape
    rows = "".join(
        f"<tr><td style=\"padding: 4px 0;\">{e(item.name)}</td>"
        f"<td style=\"text-align: center;\">x{item.quantity}</td>"
        f"<td style=\"text-align: right;\">{line_amount(item, sale, settings):.2f}</td></tr>"
        for item in sale.items
    )
    logo = f"<img src=\"{e(settings.logo)}\" class=\"logo\">" if settings.logo else ""
    discount = (
        f"<div class=\"row\"><span>Discount:</span><span>-{sale.discount:.2f} {e(sale.currency)}</span></div>"
        if sale.discount > 0
        else ""
    )
    cash = (
        f"<div>Received: {sale.amount_received:,.2f}</div><div>Change: {sale.change:,.2f}</div>"
        if sale.is_cash
        else ""
    )
    script = (
        "<script>window.onload = function() { setTimeout(function() { window.print(); if (window.opener) { window.close(); } }, 500); };</script>"
        if auto_print
        else ""
    )

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Receipt - {e(sale.id)}</title>
<style>{_PRINT_CSS}</style>
</head>
<body>
<div class="header">
  {logo}
  <div class="title">{e(settings.name)}</div>
  <div style="font-size: 10px; margin-top: 2px;">{e(settings.address)}</div>
  <div style="font-weight: bold;">Tel: {e(settings.phone)}</div>
</div>
<div class="divider"></div>
<div>RECEIPT: {e(sale.id)}</div>
<div>DATE: {e(display_date(sale.date))}</div>
<div class="divider"></div>
<table>
  <thead><tr style="border-bottom: 1px solid black; text-align: left;">
    <th>Item</th><th style="text-align: center;">Qty</th><th style="text-align: right;">Total</th>
  </tr></thead>
  <tbody>{rows}</tbody>
</table>
<div class="divider"></div>
<div class="totals">
  <div class="row"><span>Subtotal:</span><span>{sale.subtotal:.2f} {e(sale.currency)}</span></div>
  {discount}
  <div class="row grand"><span>TOTAL:</span><span>{sale.total:,.2f} {e(symbol(sale.currency))}</span></div>
</div>
<div style="margin-top: 10px; font-size: 10px;">
  <div>Payment: {e(sale.payment_method)}</div>
  {cash}
</div>
<div class="footer">*** {e(settings.thank_you_message)} ***</div>
{script}
</body>
</html>
"""


# -------------------------
# PDF
# -------------------------

def render_receipt_pdf(sale, settings) -> bytes:
    page_w = PDF_PAGE_WIDTH_MM * mm
    page_h = PDF_PAGE_HEIGHT_MM * mm
    left = PDF_MARGIN_MM * mm
    center = page_w / 2
    right = (PDF_PAGE_WIDTH_MM - PDF_MARGIN_MM) * mm

    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=(page_w, page_h))
    c.setTitle(f"Receipt {sale.id}")

    # Positions are tracked in mm from the top edge.
    y = 10.0

    def at(y_mm: float) -> float:
        return page_h - y_mm * mm

    c.setFont("Helvetica-Bold", 14)
    c.drawCentredString(center, at(y), str(settings.name))
    y += 5
    c.setFont("Helvetica", 8)
    c.drawCentredString(center, at(y), str(settings.address))
    y += 4
    c.drawCentredString(center, at(y), f"Tel: {settings.phone}")
    y += 8

    c.drawString(left, at(y), f"Receipt: {sale.id}")
    y += 4
    c.drawString(left, at(y), f"Date: {display_date(sale.date)}")
    y += 6

    def header(y_mm: float) -> float:
        c.setFont("Helvetica-Bold", 8)
        c.drawString(left, at(y_mm), "Item")
        c.drawString(40 * mm, at(y_mm), "Qty")
        c.drawRightString(right, at(y_mm), "Total")
        y_mm += 2
        c.line(left, at(y_mm), right, at(y_mm))
        c.setFont("Helvetica", 8)
        return y_mm + 4

    y = header(y)
    for item in sale.items:
        if y > PDF_BOTTOM_LIMIT_MM:
            c.showPage()
            y = header(10.0)
        c.drawString(left, at(y), str(item.name)[:PDF_ITEM_NAME_CHARS])
        c.drawString(40 * mm, at(y), str(item.quantity))
        c.drawRightString(right, at(y), f"{line_amount(item, sale, settings):.2f}")
        y += 4

    # Totals block needs roughly 30mm.
    if y > PDF_PAGE_HEIGHT_MM - 30:
        c.showPage()
        y = 10.0
        c.setFont("Helvetica", 8)

    y += 2
    c.line(left, at(y), right, at(y))
    y += 6

    c.drawRightString(40 * mm, at(y), "Subtotal:")
    c.drawRightString(right, at(y), f"{sale.subtotal:.2f}")
    y += 4
    if sale.discount > 0:
        c.drawRightString(40 * mm, at(y), "Discount:")
        c.drawRightString(right, at(y), f"-{sale.discount:.2f}")
        y += 4

    c.setFont("Helvetica-Bold", 12)
    c.drawRightString(40 * mm, at(y), "TOTAL:")
    c.drawRightString(right, at(y), f"{sale.total:.2f} {symbol(sale.currency)}")
    y += 8

    c.setFont("Helvetica", 8)
    c.drawCentredString(center, at(y), str(settings.thank_you_message))

    c.showPage()
    c.save()
    return buf.getvalue()
