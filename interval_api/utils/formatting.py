"""Display formatting for prices and slot times"""

from datetime import datetime, timezone
from decimal import ROUND_FLOOR, Decimal
from typing import Optional, Union
from zoneinfo import ZoneInfo

from ..config import DISPLAY_TIMEZONE

LAMPORTS_PER_SOL = 1_000_000_000
# Transfer amounts are u64 lamports on the wire
MAX_LAMPORTS = 2**64 - 1


def to_decimal(value: Union[Decimal, float, int, str]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() first so floats like 0.1 don't carry binary noise
    return Decimal(str(value))


def format_sol_amount(value: Union[Decimal, float, int, str]) -> str:
    """
    Render a SOL amount with at least two decimals.

    2 -> "2.00", 2.5 -> "2.50", 0.125 -> "0.125"
    """
    amount = to_decimal(value).normalize()
    exponent = amount.as_tuple().exponent
    if isinstance(exponent, int) and exponent < -2:
        return format(amount, "f")
    return format(amount.quantize(Decimal("0.01")), "f")


def sol_to_lamports(value: Union[Decimal, float, int, str]) -> int:
    """Convert SOL to lamports, rounding down to a whole lamport"""
    return int((to_decimal(value) * LAMPORTS_PER_SOL).to_integral_value(rounding=ROUND_FLOOR))


def is_settleable(value: Union[Decimal, float, int, str]) -> bool:
    """True when the amount is at least one lamport and fits a transfer instruction"""
    return 0 < sol_to_lamports(value) <= MAX_LAMPORTS


def ensure_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_display_zone(dt: datetime, tz_name: Optional[str] = None) -> datetime:
    return ensure_utc(dt).astimezone(ZoneInfo(tz_name or DISPLAY_TIMEZONE))


def _hour12(dt: datetime) -> int:
    return dt.hour % 12 or 12


def format_slot_time(dt: datetime, tz_name: Optional[str] = None) -> str:
    """e.g. 3/14/2026, 4:05:00 PM"""
    local = to_display_zone(dt, tz_name)
    return (
        f"{local.month}/{local.day}/{local.year}, "
        f"{_hour12(local)}:{local.minute:02d}:{local.second:02d} {local.strftime('%p')}"
    )


def format_long_date(dt: datetime, tz_name: Optional[str] = None) -> str:
    """e.g. Saturday, March 14, 2026"""
    local = to_display_zone(dt, tz_name)
    return f"{local.strftime('%A')}, {local.strftime('%B')} {local.day}, {local.year}"


def format_short_time(dt: datetime, tz_name: Optional[str] = None) -> str:
    """e.g. 4:05 PM"""
    local = to_display_zone(dt, tz_name)
    return f"{_hour12(local)}:{local.minute:02d} {local.strftime('%p')}"
