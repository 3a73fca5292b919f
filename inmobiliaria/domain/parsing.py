# inmobiliaria/domain/parsing.py
from __future__ import annotations

import math
import re
from datetime import datetime, timezone
from typing import Any

from ..exceptions import RowValidationError

_CURRENCY_RE = re.compile(r"€|\$|£|\beur(?:os)?\b", re.IGNORECASE)
_WS_RE = re.compile(r"\s+")
# "240.000,50" -> cents are dropped, only 1-2 trailing digits count as decimals
_DECIMALS_RE = re.compile(r"[.,][0-9]{1,2}$")
_DIGITS_RE = re.compile(r"[0-9]+")
# first integer, honouring dotted thousands: "1.200 m²" -> 1200
_LEADING_INT_RE = re.compile(r"[0-9]{1,3}(?:\.[0-9]{3})+|[0-9]+")
# largest value an INTEGER column holds
MAX_DB_INT = 2**63 - 1


def get_first(payload: dict[str, Any], *keys: str) -> Any:
    """Return first non-empty key from payload."""
    for k in keys:
        v = payload.get(k)
        if v is None:
            continue
        if isinstance(v, str) and not v.strip():
            continue
        return v
    return None


def clean_text(x: Any) -> str | None:
    if x is None:
        return None
    s = _WS_RE.sub(" ", str(x)).strip()
    return s or None


def parse_price(raw: Any) -> int:
    """
    Free-text price -> positive integer.

      "240.000 €" -> 240000
      "90.000€"   -> 90000
      240000      -> 240000

    Raises RowValidationError for empty, non-numeric, non-positive or out-of-range values.
    """
    if raw is None or isinstance(raw, bool):
        raise RowValidationError("price is missing")

    if isinstance(raw, (int, float)):
        if isinstance(raw, float) and not math.isfinite(raw):
            raise RowValidationError(f"price is not a number: {raw!r}")
        value = int(raw)
    else:
        s = _WS_RE.sub("", _CURRENCY_RE.sub("", str(raw)))
        if not s:
            raise RowValidationError("price is empty")
        if s.startswith("-"):
            raise RowValidationError(f"price must be a positive number: {raw!r}")
        s = _DECIMALS_RE.sub("", s).replace(".", "").replace(",", "")
        if not _DIGITS_RE.fullmatch(s):
            raise RowValidationError(f"price is not a number: {raw!r}")
        value = int(s)

    if value <= 0:
        raise RowValidationError(f"price must be a positive number: {raw!r}")
    if value > MAX_DB_INT:
        raise RowValidationError(f"price is out of range: {raw!r}")
    return value


def leading_int(raw: Any) -> int | None:
    """First integer found in free text ("3 hab." -> 3, "90 m²" -> 90), else None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    elif isinstance(raw, float):
        if not math.isfinite(raw):
            return None
        value = int(raw)
    else:
        m = _LEADING_INT_RE.search(str(raw))
        if not m:
            return None
        value = int(m.group(0).replace(".", ""))

    if value < 0 or value > MAX_DB_INT:
        return None
    return value


def parse_timestamp(raw: Any) -> datetime | None:
    """ISO-8601 scrape timestamps; unparseable values are dropped, not fatal."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        dt = raw
    else:
        s = str(raw).strip()
        if not s:
            return None
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None

    # stored naive UTC, like every other DateTime column
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
