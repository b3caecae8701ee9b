from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from vendix.db import kv_get, kv_remove, kv_set
from vendix.schema import KEY_LICENSE

logger = logging.getLogger(__name__)

# Keys handed out to customers. Shape: PREFIX-YYYYMMDD-SUFFIX (expiry date in the middle).
LICENSE_KEYS = frozenset(
    {
        "VENDIX-20261231-AB12",
        "VENDIX-20270331-CD34",
        "VENDIX-20270630-EF56",
        "VENDIX-20271231-GH78",
        "VENDIX-20281231-JK90",
    }
)

EXPIRY_WARNING_DAYS = 7

REASON_NO_KEY = "no-key"
REASON_INVALID_KEY = "invalid key"
REASON_BAD_FORMAT = "bad format"
REASON_EXPIRED = "expired"

REASON_MESSAGES = {
    REASON_NO_KEY: "Enter your license key to use the application.",
    REASON_INVALID_KEY: "Invalid license key.",
    REASON_BAD_FORMAT: "Malformed license key.",
    REASON_EXPIRED: "This license has expired. Contact support to renew.",
}


@dataclass(frozen=True)
class LicenseStatus:
    valid: bool
    key: Optional[str] = None
    reason: Optional[str] = None
    days_remaining: Optional[int] = None
    expiry_display: Optional[str] = None

    @property
    def message(self) -> str:
        if self.valid:
            return f"License valid until {self.expiry_display} ({self.days_remaining} day(s) left)."
        return REASON_MESSAGES.get(str(self.reason), "License rejected.")


def normalize_key(key: Optional[str]) -> str:
    return str(key or "").strip().upper()


def _today(today: Optional[date]) -> date:
    # Local calendar day; time of day never matters.
    if today is None:
        return date.today()
    if isinstance(today, datetime):
        return today.date()
    return today


def _parse_expiry(segment: str) -> Optional[date]:
    if len(segment) != 8 or not segment.isdigit():
        return None
    try:
        return datetime.strptime(segment, "%Y%m%d").date()
    except ValueError:
        return None


def validate_license(key: Optional[str], today: Optional[date] = None) -> LicenseStatus:
    """
    Checks run in a fixed order: allow-list, then shape, then expiry.
    """
    k = normalize_key(key)
    if k not in LICENSE_KEYS:
        return LicenseStatus(valid=False, key=k, reason=REASON_INVALID_KEY)

    parts = k.split("-")
    if len(parts) != 3:
        return LicenseStatus(valid=False, key=k, reason=REASON_BAD_FORMAT)

    expiry = _parse_expiry(parts[1])
    if expiry is None:
        return LicenseStatus(valid=False, key=k, reason=REASON_BAD_FORMAT)

    now = _today(today)
    if now > expiry:
        return LicenseStatus(valid=False, key=k, reason=REASON_EXPIRED)

    days = math.ceil((expiry - now).total_seconds() / 86400)
    return LicenseStatus(
        valid=True,
        key=k,
        days_remaining=int(days),
        expiry_display=expiry.strftime("%d/%m/%Y"),
    )


def check_stored_license(conn, today: Optional[date] = None) -> LicenseStatus:
    stored = kv_get(conn, KEY_LICENSE)
    if not stored:
        return LicenseStatus(valid=False, reason=REASON_NO_KEY)

    status = validate_license(stored, today)
    if status.reason == REASON_EXPIRED:
        kv_remove(conn, KEY_LICENSE)
        logger.info("Stored license %s expired and was removed", status.key)
    return status


def activate_license(conn, key: Optional[str], today: Optional[date] = None) -> LicenseStatus:
    status = validate_license(key, today)
    if not status.valid:
        if status.reason == REASON_EXPIRED:
            kv_remove(conn, KEY_LICENSE)
        logger.warning("License activation rejected (%s)", status.reason)
        return status

    kv_set(conn, KEY_LICENSE, str(status.key))
    logger.info("License activated; expires %s", status.expiry_display)
    return status


def deactivate_license(conn) -> None:
    kv_remove(conn, KEY_LICENSE)


def needs_expiry_warning(status: LicenseStatus) -> bool:
    return bool(status.valid and status.days_remaining is not None and status.days_remaining <= EXPIRY_WARNING_DAYS)
