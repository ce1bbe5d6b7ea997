from __future__ import annotations

import math
import secrets
import string
from datetime import datetime, date, timezone
from typing import Any, Iterable, Optional

_ID_ALPHABET = string.ascii_lowercase + string.digits


def iso_today() -> str:
    return date.today().isoformat()


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def new_id(prefix: str, taken: Iterable[str] = ()) -> str:
    """Short random id such as ``it_k3v9x0a``, never one of ``taken``."""
    taken = set(taken)
    while True:
        candidate = f"{prefix}_" + "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
        if candidate not in taken:
            return candidate


def to_qty(value: Any) -> float:
    # Missing, blank or non-numeric quantities count as zero.
    if value is None:
        return 0.0
    try:
        qty = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(qty) or math.isinf(qty):
        return 0.0
    return qty


def _parse_datetime(value: Any) -> Optional[datetime]:
    # As written: offsets are kept, nothing is shifted.
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    s = str(value).strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        return None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a business date (``YYYY-MM-DD``) or an ISO timestamp into a naive UTC datetime.
    Returns None for anything that cannot be read as one.
    """
    dt = _parse_datetime(value)
    if dt is not None and dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_day(value: Any) -> Optional[date]:
    """Calendar day a date or timestamp was written with, ignoring its offset."""
    dt = _parse_datetime(value)
    return dt.date() if dt is not None else None
