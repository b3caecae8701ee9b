from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from vendix.db import load_json, save_json
from vendix.schema import KEY_SALES
from vendix.services.business import BusinessSettings
from vendix.services.cart import Cart, CartItem
from vendix.services.catalog import list_products, replace_products
from vendix.services.pricing import Currency, normalize_currency
from vendix.utils import epoch_ms

logger = logging.getLogger(__name__)


class PaymentMethod(str, Enum):
    CASH = "Cash"
    MONCASH = "MonCash"
    NATCASH = "NatCash"
    BANK = "Virement"


QR_METHODS = {PaymentMethod.MONCASH, PaymentMethod.NATCASH}


class CheckoutState(str, Enum):
    IDLE = "IDLE"
    REVIEWING = "REVIEWING"
    AWAITING_CONFIRMATION = "AWAITING_CONFIRMATION"


class InsufficientPaymentError(ValueError):
    def __init__(self, total: float, received: float):
        super().__init__("Insufficient amount received.")
        self.total = total
        self.received = received


@dataclass(frozen=True)
class Sale:
    id: str
    date: str  # ISO datetime, UTC
    items: tuple[CartItem, ...]
    subtotal: float
    discount: float
    total: float
    currency: str
    rate: float
    payment_method: str
    amount_received: float
    change: float

    @classmethod
    def from_dict(cls, data: dict) -> "Sale":
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            items=tuple(CartItem.from_dict(i) for i in data.get("items", [])),
            subtotal=float(data["subtotal"]),
            discount=float(data.get("discount", 0) or 0),
            total=float(data["total"]),
            currency=str(data["currency"]),
            rate=float(data["rate"]),
            payment_method=str(data["payment_method"]),
            amount_received=float(data.get("amount_received", 0) or 0),
            change=float(data.get("change", 0) or 0),
        )

    def to_dict(self) -> dict:
        d = asdict(self)
        d["items"] = [i.to_dict() for i in self.items]
        return d

    @property
    def is_cash(self) -> bool:
        return self.payment_method == PaymentMethod.CASH.value


def _normalize_payment_method(method) -> PaymentMethod:
    if isinstance(method, PaymentMethod):
        return method
    try:
        return PaymentMethod(str(method))
    except ValueError:
        raise ValueError("Invalid payment method.")


def _non_negative(value, label: str) -> float:
    try:
        v = float(value or 0)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be a number.")
    if v < 0:
        raise ValueError(f"{label} must be >= 0.")
    return v


def compute_total(subtotal: float, discount: float) -> float:
    return max(0.0, subtotal - discount)


def compute_change(method, received: float, total: float) -> float:
    if _normalize_payment_method(method) != PaymentMethod.CASH:
        return 0.0
    return max(0.0, received - total)


# -------------------------
# Sale log
# -------------------------

def list_sales(conn) -> list[Sale]:
    """Newest first."""
    return [Sale.from_dict(s) for s in load_json(conn, KEY_SALES, [])]


def _append_sale(conn, sale: Sale) -> None:
    # Prepend on the raw documents so older records are written back untouched.
    raw = load_json(conn, KEY_SALES, [])
    save_json(conn, KEY_SALES, [sale.to_dict(), *raw])


def _decrement_stock(conn, items) -> None:
    sold: dict[str, int] = {}
    for i in items:
        sold[i.id] = sold.get(i.id, 0) + int(i.quantity)

    products = list_products(conn)
    for p in products:
        if p.id in sold:
            # Clamped: concurrent sessions on one store can still oversell.
            p.stock = max(0, int(p.stock) - sold[p.id])
    replace_products(conn, products)


def record_sale(
    conn,
    *,
    cart: Cart,
    settings: BusinessSettings,
    currency,
    payment_method,
    discount: float = 0.0,
    amount_received: float = 0.0,
    now: Optional[datetime] = None,
) -> Sale:
    """
    Validates payment, builds the immutable sale, prepends it to the sale log
    and decrements stock. Nothing is written unless validation passes.
    """
    if cart.is_empty():
        raise ValueError("Cart is empty.")

    method = _normalize_payment_method(payment_method)
    currency = normalize_currency(currency)
    discount = _non_negative(discount, "Discount")
    received = _non_negative(amount_received, "Amount received")

    subtotal = cart.subtotal(currency, settings)
    total = compute_total(subtotal, discount)

    if method == PaymentMethod.CASH and received < total:
        raise InsufficientPaymentError(total=total, received=received)

    now = now or datetime.now(timezone.utc)
    sale = Sale(
        id=f"REC-{epoch_ms(now)}",
        date=now.astimezone(timezone.utc).replace(microsecond=0).isoformat(),
        items=tuple(cart.snapshot()),
        subtotal=subtotal,
        discount=discount,
        total=total,
        currency=currency.value,
        rate=float(settings.conversion_rate),
        payment_method=method.value,
        amount_received=received if method == PaymentMethod.CASH else total,
        change=compute_change(method, received, total),
    )

    _append_sale(conn, sale)
    _decrement_stock(conn, sale.items)
    logger.info("Sale %s finalized: %.2f %s via %s", sale.id, sale.total, sale.currency, sale.payment_method)
    return sale


# -------------------------
# Checkout state machine
# -------------------------

@dataclass
class Checkout:
    """
    Per-session checkout workflow:

        IDLE -> REVIEWING (cart non-empty)
             -> AWAITING_CONFIRMATION (QR methods with a configured QR image)
             -> finalized, back to IDLE

    QR confirmation trusts the operator; there is no payment verification.
    """

    cart: Cart = field(default_factory=Cart)
    discount: float = 0.0
    payment_method: PaymentMethod = PaymentMethod.CASH
    amount_received: float = 0.0
    awaiting_confirmation: bool = False
    last_sale: Optional[Sale] = None

    @property
    def state(self) -> CheckoutState:
        if self.cart.is_empty():
            return CheckoutState.IDLE
        if self.awaiting_confirmation:
            return CheckoutState.AWAITING_CONFIRMATION
        return CheckoutState.REVIEWING

    def subtotal(self, currency, settings: BusinessSettings) -> float:
        return self.cart.subtotal(currency, settings)

    def total(self, currency, settings: BusinessSettings) -> float:
        return compute_total(self.subtotal(currency, settings), float(self.discount or 0))

    def change(self, currency, settings: BusinessSettings) -> float:
        return compute_change(self.payment_method, float(self.amount_received or 0), self.total(currency, settings))

    def submit(self, conn, settings: BusinessSettings, currency, now: Optional[datetime] = None) -> Optional[Sale]:
        """
        Returns the finalized sale, or None when the cart is empty or the
        payment now waits for QR confirmation.
        """
        if self.cart.is_empty():
            self.awaiting_confirmation = False
            return None
        method = _normalize_payment_method(self.payment_method)
        if method == PaymentMethod.CASH:
            total = self.total(currency, settings)
            received = float(self.amount_received or 0)
            if received < total:
                raise InsufficientPaymentError(total=total, received=received)
        if method in QR_METHODS and settings.qr_for(method):
            self.awaiting_confirmation = True
            return None
        return self._finalize(conn, settings, currency, now)

    def cancel(self) -> None:
        self.awaiting_confirmation = False

    def confirm(self, conn, settings: BusinessSettings, currency, now: Optional[datetime] = None) -> Sale:
        if not self.awaiting_confirmation:
            raise ValueError("No payment is waiting for confirmation.")
        if self.cart.is_empty():
            self.awaiting_confirmation = False
            raise ValueError("Cart is empty.")
        return self._finalize(conn, settings, currency, now)

    def _finalize(self, conn, settings: BusinessSettings, currency, now: Optional[datetime]) -> Sale:
        sale = record_sale(
            conn,
            cart=self.cart,
            settings=settings,
            currency=currency,
            payment_method=self.payment_method,
            discount=self.discount,
            amount_received=self.amount_received,
            now=now,
        )
        self.last_sale = sale
        self.reset()
        return sale

    def reset(self) -> None:
        self.cart.clear()
        self.discount = 0.0
        self.amount_received = 0.0
        self.awaiting_confirmation = False


# -------------------------
# History
# -------------------------

def filter_sales(sales: list[Sale], search: str = "", day: Optional[str] = None) -> list[Sale]:
    needle = str(search or "").strip().lower()
    out: list[Sale] = []
    for s in sales:
        if needle and needle not in s.id.lower():
            continue
        if day and not s.date.startswith(str(day)):
            continue
        out.append(s)
    return out


def sales_stats(sales: list[Sale]) -> dict:
    return {
        "count": len(sales),
        "total_usd": sum(s.total for s in sales if s.currency == Currency.USD.value),
        "total_htg": sum(s.total for s in sales if s.currency == Currency.HTG.value),
    }
