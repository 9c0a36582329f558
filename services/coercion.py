# services/coercion.py
"""
Cell value coercion for the spreadsheet normalizer.

Every function here is total: messy cell content degrades to a safe default
("" / 0 / False / the trimmed text) instead of raising.
"""
from __future__ import annotations

import math
import re
from datetime import date, datetime, time, timedelta
from typing import Any

from openpyxl.utils.datetime import WINDOWS_EPOCH, from_excel

SECS_PER_DAY = 86400

TRUTHY_STRINGS = frozenset({"yes", "y", "true", "t", "sold", "soldout", "1"})

_SHORT_TIME_RE = re.compile(r"^\d{1,2}:\d{2}$")


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _is_finite(v: Any) -> bool:
    # ints past the float range (openpyxl reads any all-digit <v> as int)
    try:
        return math.isfinite(v)
    except OverflowError:
        return False


def _is_empty(v: Any) -> bool:
    return v is None or v == ""


def cell_text(v: Any) -> str:
    """String form of a cell, the way it would show in a text column."""
    if v is None:
        return ""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float) and math.isfinite(v) and v.is_integer():
        return str(int(v))
    return str(v)


def _hms(total_seconds: int) -> str:
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def _ymd(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def format_date_part(v: Any, epoch: datetime = WINDOWS_EPOCH) -> str:
    """
    Render a date cell as YYYY-MM-DD.

    Native dates use their calendar fields, numbers are decoded as spreadsheet
    date serials against the workbook epoch. Text is only trimmed.
    """
    if _is_empty(v):
        return ""
    if isinstance(v, (datetime, date)):
        return _ymd(v)
    if _is_number(v) and _is_finite(v) and v >= 1:
        try:
            decoded = from_excel(v, epoch=epoch)
        except (OverflowError, ValueError, TypeError):
            decoded = None
        if isinstance(decoded, datetime):
            return _ymd(decoded)
    return cell_text(v).strip()


def format_time_part(v: Any) -> str:
    """
    Render a time cell as HH:MM:SS (24-hour).

    Serials keep only their day fraction, rounded to the nearest second.
    "H:MM" / "HH:MM" text gets ":00" appended; other text passes through.
    """
    if _is_empty(v):
        return ""
    if isinstance(v, datetime):
        return _hms(v.hour * 3600 + v.minute * 60 + v.second)
    if isinstance(v, date):
        return "00:00:00"
    if isinstance(v, time):
        return _hms(v.hour * 3600 + v.minute * 60 + v.second)
    if isinstance(v, timedelta):
        return _hms(int(v.total_seconds()) % SECS_PER_DAY)
    if _is_number(v) and _is_finite(v):
        fraction = v - math.floor(v)
        seconds = int(math.floor(fraction * SECS_PER_DAY + 0.5))
        return _hms(seconds % SECS_PER_DAY)

    s = cell_text(v).strip()
    if _SHORT_TIME_RE.match(s):
        return f"{s}:00"
    return s


def to_num(v: Any) -> int | float:
    """Parse a count-like cell. Thousands separators are allowed; anything unparseable is 0."""
    if isinstance(v, bool):
        return 0
    if _is_number(v):
        n = v
    else:
        s = cell_text(v).replace(",", "").strip()
        if not s:
            return 0
        # float() accepts "1_000", spreadsheets don't
        if "_" in s:
            return 0
        try:
            n = float(s)
        except ValueError:
            return 0

    if not _is_finite(n):
        return 0
    if isinstance(n, float) and n.is_integer():
        return int(n)
    return n


def to_bool(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    if _is_number(v):
        return v != 0
    s = cell_text(v).strip().lower()
    if not s:
        return False
    return s in TRUTHY_STRINGS
