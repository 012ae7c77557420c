# backend/benchboard/core/utils.py
"""
Generic helpers used across ingestion, persistence and matching.

Includes:
- safe JSON extraction from noisy LLM output
- spreadsheet cell helpers (blank detection, numeric coercion)
- date decoding (spreadsheet serials, free text) and time math
"""

from __future__ import annotations

import json
import math
import numbers
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Optional

from dateutil import parser as _dp

# -------- JSON + strings -----------------------------------------------------

def json_loose(s: str) -> Any:
    """
    Parse a possibly noisy LLM response and return the first valid JSON object/array.
    Code fences and leading prose are tolerated; anything else raises ValueError.
    """
    s = (s or "").strip()
    try:
        return json.loads(s)
    except ValueError:
        m = re.search(r"\{.*\}|\[.*\]", s, flags=re.S)
        if m:
            return json.loads(m.group(0))
        raise

# -------- Spreadsheet cells --------------------------------------------------

def is_blank(value: Any) -> bool:
    """True for None, NaN and empty/whitespace strings (what an empty cell looks like)."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False

def to_int(value: Any) -> Optional[int]:
    """
    Coerce a cell to int. Non-numeric input gives None instead of NaN.
    Fractions are rounded since the target columns are INTEGER.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        f = float(str(value).strip()) if not isinstance(value, float) else value
    except ValueError:
        return None
    if math.isnan(f) or math.isinf(f):
        return None
    return int(round(f))

def to_text(value: Any) -> Optional[str]:
    if is_blank(value):
        return None
    if isinstance(value, float) and value.is_integer():
        # ids typed as numbers in a sheet come through as 1011.0
        return str(int(value))
    return str(value).strip()

# -------- Time + dates -------------------------------------------------------

# 1900 date system: serial 1 is 1900-01-01 and serial 60 is the fictitious
# 1900-02-29, so serials past 60 count from 1899-12-30.
_EXCEL_EPOCH_LOW = date(1899, 12, 31)
_EXCEL_EPOCH_HIGH = date(1899, 12, 30)
_EXCEL_MAX_SERIAL = 2958465  # 9999-12-31

def now_utc() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)

def excel_serial_to_date(serial: float) -> Optional[date]:
    """Decode a spreadsheet date serial (time fraction dropped)."""
    if isinstance(serial, bool) or math.isnan(serial) or math.isinf(serial):
        return None
    days = int(math.floor(serial))
    if days < 0 or days > _EXCEL_MAX_SERIAL:
        return None
    base = _EXCEL_EPOCH_LOW if days <= 60 else _EXCEL_EPOCH_HIGH
    return base + timedelta(days=days)

def parse_date_text(s: str) -> Optional[date]:
    """Free-text date via python-dateutil; None when it does not parse."""
    s = (s or "").strip()
    if not s:
        return None
    try:
        return _dp.parse(s).date()
    except (ValueError, OverflowError):
        return None

def parse_date_value(value: Any) -> Optional[date]:
    """
    Accept whatever a spreadsheet cell holds for a date: a numeric serial,
    free text, or a date/datetime already decoded by the reader.
    """
    if is_blank(value) or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, numbers.Real):
        return excel_serial_to_date(float(value))
    return parse_date_text(str(value))

def iso_date(value: Any) -> Optional[str]:
    """YYYY-MM-DD or None."""
    d = parse_date_value(value)
    return d.isoformat() if d else None

def days_between(start: date, end: date) -> int:
    return (end - start).days


__all__ = [
    # json/string utils
    "json_loose",
    # cells
    "is_blank", "to_int", "to_text",
    # time/dates
    "now_utc", "excel_serial_to_date", "parse_date_text", "parse_date_value",
    "iso_date", "days_between",
]
