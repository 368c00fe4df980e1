from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional, Union

DateInput = Union[date, datetime, str]

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")


# PUBLIC_INTERFACE
def utcnow() -> datetime:
    """Return the current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# PUBLIC_INTERFACE
def parse_datetime(value: Optional[DateInput]) -> Optional[datetime]:
    """
    Normalize a date, datetime or ISO8601 string into a naive UTC datetime.
    - Dates (and date-only strings) are promoted to midnight.
    - Aware datetimes are converted to UTC; a trailing 'Z' is accepted.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return _to_naive_utc(value)

    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, 0, 0, 0)

    if isinstance(value, str):
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            return _to_naive_utc(datetime.fromisoformat(s))
        except ValueError:
            try:
                d = date.fromisoformat(s)
            except ValueError as e:
                raise ValueError(
                    "Invalid date format. Use ISO8601 date or datetime string (e.g., '2025-01-31' or '2025-01-31T13:45:00')."
                ) from e
            return datetime(d.year, d.month, d.day, 0, 0, 0)

    raise ValueError("Invalid type for date; expected date, datetime, or ISO8601 string.")


# PUBLIC_INTERFACE
def parse_date(value: Optional[DateInput]) -> Optional[date]:
    """Normalize a date, datetime or ISO8601 string into a calendar date."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None


# PUBLIC_INTERFACE
def is_valid_email(value: str) -> bool:
    """Loose email shape check: something@something.something."""
    return bool(_EMAIL_RE.fullmatch(value.strip()))


# PUBLIC_INTERFACE
def duration_ms(start: datetime, end: datetime) -> int:
    """Whole milliseconds elapsed between two datetimes."""
    delta = end - start
    return (delta.days * 86_400_000) + (delta.seconds * 1000) + (delta.microseconds // 1000)


# PUBLIC_INTERFACE
def format_duration(milliseconds: Optional[int]) -> str:
    """
    Human summary of a duration, as shown on time tracking summaries.

    Examples: 0 -> '0h 0m', 300000 -> '5m', 5400000 -> '1h 30m'.
    """
    if not milliseconds:
        return "0h 0m"
    total_seconds = milliseconds // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


# PUBLIC_INTERFACE
def format_currency(amount: Union[Decimal, int, float]) -> str:
    """US dollar rendering with thousands separators, e.g. '$12,450.00'."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"))
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def percent(part: float, whole: float) -> int:
    """Rounded percentage; 0 when whole is 0."""
    if not whole:
        return 0
    # half-up rounding
    return int(math.floor(part / whole * 100 + 0.5))


def ms_to_hours(milliseconds: int) -> float:
    return round(milliseconds / 3_600_000, 2)
