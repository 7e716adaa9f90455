from __future__ import annotations

import logging
import math
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import pandas as pd

"""Flexible date parser for spreadsheet cells.

Accepted inputs, tried in order until one yields a well-formed instant:

1. ISO-8601 text (``2025-04-01T08:00:00``, ``2025-04-01 08:00:00Z``, ...)
2. Spreadsheet serial-day numbers (``45675.6667``), counted from
   1899-12-30 UTC. Spreadsheet engines treat 1900 as a leap year, which is
   why the effective epoch is the 30th and not the 31st.
3. ``dd/mm/yyyy HH:MM:SS``
4. ``dd/mm/yyyy HH:MM``

Native datetime / date / pandas.Timestamp cells are accepted as they are.
Naive results are localized to the configured timezone so every returned
value is timezone-aware and comparable. The parser never raises; None means
"no format matched".
"""

__all__ = [
    "SPREADSHEET_EPOCH",
    "LOCAL_PATTERNS",
    "parse_flexible_date",
    "hours_between",
    "resolve_timezone",
]

logger = logging.getLogger(__name__)

SPREADSHEET_EPOCH = datetime(1899, 12, 30, tzinfo=UTC)
LOCAL_PATTERNS: tuple[str, ...] = ("%d/%m/%Y %H:%M:%S", "%d/%m/%Y %H:%M")


def resolve_timezone(tz: str | tzinfo | None) -> tzinfo:
    """Resolve a timezone name (e.g. "America/Sao_Paulo") to a tzinfo.

    Unknown names fall back to UTC with a warning.
    """
    if tz is None:
        return UTC
    if isinstance(tz, tzinfo):
        return tz
    if tz.upper() == "UTC":
        return UTC
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"unknown timezone '{tz}', using UTC")
        return UTC


def _localize(value: datetime, tz: tzinfo) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value


def _from_serial(serial: float) -> datetime | None:
    if not math.isfinite(serial):
        return None
    try:
        return SPREADSHEET_EPOCH + timedelta(days=serial)
    except OverflowError:
        return None


def _parse_text(text: str, tz: tzinfo) -> datetime | None:
    # (a) ISO-8601
    try:
        return _localize(datetime.fromisoformat(text), tz)
    except ValueError:
        pass

    # (b) シリアル値 (数値文字列のみ)
    try:
        serial = float(text)
    except ValueError:
        serial = None
    if serial is not None:
        parsed = _from_serial(serial)
        if parsed is not None:
            return parsed

    # (c)(d) dd/mm/yyyy HH:MM[:SS]
    for pattern in LOCAL_PATTERNS:
        try:
            return datetime.strptime(text, pattern).replace(tzinfo=tz)
        except ValueError:
            continue
    return None


def parse_flexible_date(value: Any, *, tz: str | tzinfo | None = UTC) -> datetime | None:
    """Parse a cell value into a timezone-aware datetime.

    Parameters:
        value: Cell value (str, int, float, datetime, date, Timestamp, None)
        tz: Timezone applied to naive results

    Returns:
        Aware datetime, or None when the value is empty or no format matches
    """
    zone = resolve_timezone(tz)
    try:
        if value is None or isinstance(value, bool):
            return None
        if value is pd.NaT:
            return None
        if isinstance(value, pd.Timestamp):
            return _localize(value.to_pydatetime(), zone)
        if isinstance(value, datetime):
            return _localize(value, zone)
        if isinstance(value, date):
            return datetime.combine(value, time(), tzinfo=zone)
        if isinstance(value, (int, float)):
            return _from_serial(float(value))
        text = str(value).strip()
        if not text:
            return None
        return _parse_text(text, zone)
    except (TypeError, ValueError, OverflowError) as e:
        logger.debug(f"unparseable date {value!r}: {e}")
        return None


def hours_between(start: datetime, end: datetime) -> float:
    """Elapsed hours from ``start`` to ``end`` (negative when end is earlier)."""
    return (end - start).total_seconds() / 3600.0
