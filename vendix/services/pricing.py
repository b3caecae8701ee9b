from __future__ import annotations

from enum import Enum


class Currency(str, Enum):
    USD = "USD"
    HTG = "HTG"


CURRENCY_SYMBOLS = {Currency.USD: "$", Currency.HTG: "G"}
CURRENCY_NAMES = {Currency.USD: "Dollars", Currency.HTG: "Gourdes"}


def normalize_currency(currency) -> Currency:
    if isinstance(currency, Currency):
        return currency
    c = str(currency or "").strip().upper()
    try:
        return Currency(c)
    except ValueError:
        raise ValueError("Invalid currency. Use 'USD' or 'HTG'.")


def convert(amount: float, target_currency, settings) -> float:
    """
    Converts a base-currency amount to `target_currency`.

    `settings.conversion_rate` is HTG per 1 USD. No rounding here: amounts are
    only rounded when formatted for display.
    """
    base = normalize_currency(settings.default_currency)
    target = normalize_currency(target_currency)
    if base == target:
        return amount
    if base == Currency.USD and target == Currency.HTG:
        return amount * float(settings.conversion_rate)
    return amount / float(settings.conversion_rate)


def symbol(currency) -> str:
    return CURRENCY_SYMBOLS[normalize_currency(currency)]


def format_money(amount: float, currency) -> str:
    return f"{float(amount):,.2f} {symbol(currency)}"
