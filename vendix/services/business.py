from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, fields

from vendix.db import load_json, save_json
from vendix.schema import KEY_SETTINGS
from vendix.services.pricing import Currency, normalize_currency

logger = logging.getLogger(__name__)


@dataclass
class BusinessSettings:
    name: str = "Vendix POS"
    address: str = "Port-au-Prince, Haiti"
    phone: str = "+509 0000-0000"
    logo: str = ""  # data URI
    default_currency: str = Currency.HTG.value
    conversion_rate: float = 130.0  # 1 USD = rate HTG
    thank_you_message: str = "Thank you for your visit!"
    primary_color: str = "#2563eb"
    moncash_qr: str = ""  # data URI
    natcash_qr: str = ""  # data URI

    @classmethod
    def from_dict(cls, data: dict) -> "BusinessSettings":
        known = {f.name for f in fields(cls)}
        merged = {**asdict(cls()), **{k: v for k, v in dict(data or {}).items() if k in known}}
        merged["conversion_rate"] = float(merged["conversion_rate"])
        return cls(**merged)

    def qr_for(self, payment_method) -> str:
        method = str(getattr(payment_method, "value", payment_method))
        if method == "MonCash":
            return self.moncash_qr or ""
        if method == "NatCash":
            return self.natcash_qr or ""
        return ""


def load_business_settings(conn) -> BusinessSettings:
    # Stored values are laid over the defaults so new fields pick up a value.
    return BusinessSettings.from_dict(load_json(conn, KEY_SETTINGS, {}))


def save_business_settings(conn, settings: BusinessSettings) -> BusinessSettings:
    name = str(settings.name or "").strip()
    if not name:
        raise ValueError("Business name is required.")
    settings.name = name
    settings.default_currency = normalize_currency(settings.default_currency).value

    try:
        rate = float(settings.conversion_rate)
    except (TypeError, ValueError):
        raise ValueError("Conversion rate must be a number.")
    if rate <= 0:
        raise ValueError("Conversion rate must be > 0.")
    settings.conversion_rate = rate

    save_json(conn, KEY_SETTINGS, asdict(settings))
    logger.info("Business settings saved (currency=%s rate=%s)", settings.default_currency, rate)
    return settings


def theme_css(primary_color: str) -> str:
    color = str(primary_color or "#2563eb")
    return f"""
<style>
:root {{
  --vendix-primary: {color};
  --vendix-primary-soft: {color}1a;
}}
div.stButton > button[kind="primary"],
div.stDownloadButton > button[kind="primary"],
div.stFormSubmitButton > button[kind="primary"] {{
  background-color: var(--vendix-primary);
  border-color: var(--vendix-primary);
}}
</style>
"""
