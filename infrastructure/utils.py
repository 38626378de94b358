"""Timestamp and number formatting shared by file naming and CSV rows.

This module centralizes the timestamp pattern so file names and log rows agree
on a single, locale-independent representation.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
import math
import time

TIMESTAMP_FMT = "%Y%m%d_%H%M%S"


def format_timestamp(dt: datetime) -> str:
    """Format `dt` as `YYYYMMDD_HHMMSS`."""
    return dt.strftime(TIMESTAMP_FMT)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a `YYYYMMDD_HHMMSS` value; return None on failure."""
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), TIMESTAMP_FMT)
    except (ValueError, TypeError):
        return None


def format_coordinate(value: float) -> str:
    """Render a coordinate at full precision without exponent notation.

    Uses the shortest repr that round-trips, expanded to positional form, and
    always keeps a decimal point (``1.0``, ``0.00001``, ``-33.8688``).
    """
    v = float(value)
    if not math.isfinite(v):
        raise ValueError(f"Coordinate is not finite: {value!r}")
    text = format(Decimal(repr(v)), "f")
    if "." not in text:
        text += ".0"
    return text


class Clock:
    """Wall-clock source for timestamps and millisecond file suffixes."""

    def now(self) -> str:
        """Current local time as `YYYYMMDD_HHMMSS`."""
        return format_timestamp(datetime.now())

    def millis(self) -> int:
        """Current epoch time in milliseconds."""
        return time.time_ns() // 1_000_000
