from __future__ import annotations

import base64
import time
from datetime import datetime, date, timezone
from typing import Optional


def iso_today() -> str:
    return date.today().isoformat()


def to_local(iso_ts: Optional[str]) -> Optional[datetime]:
    """Stored timestamps are UTC ISO strings; returns local time, or None if unparseable."""
    try:
        dt = datetime.fromisoformat(str(iso_ts).replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt


def local_day(iso_ts: Optional[str]) -> str:
    dt = to_local(iso_ts)
    return dt.date().isoformat() if dt is not None else ""


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def epoch_ms(now: Optional[datetime] = None) -> int:
    if now is None:
        return int(time.time() * 1000)
    return int(now.timestamp() * 1000)


def encode_data_uri(data: bytes, mime: str = "image/png") -> str:
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: Optional[str]) -> Optional[bytes]:
    """
    Returns the raw bytes of a `data:<mime>;base64,<payload>` string, or None
    when the field is empty or not base64 encoded.
    """
    if not uri or not str(uri).startswith("data:"):
        return None
    header, _, payload = str(uri).partition(",")
    if not header.endswith(";base64"):
        return None
    return base64.b64decode(payload)
