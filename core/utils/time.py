"""
Time Utilities

This module provides utilities for handling timestamps from different exchanges.

Different exchanges return funding settlement timestamps in different formats:
- Binance / Bybit: milliseconds since epoch (e.g., 1704110400000)
- Some ccxt venues: seconds since epoch (e.g., 1704110400)
- We need: Python datetime objects in UTC, rendered as a local "HH:MM" string

The utilities in this module normalize all timestamp formats into
consistent UTC datetime objects.
"""

from datetime import datetime, timezone, tzinfo
from typing import Any, Optional, Union


# Epoch values above this are milliseconds (seconds stay ~1.7e9 until year 2286)
MILLISECONDS_THRESHOLD = 1e12

NOT_AVAILABLE = "N/A"


def to_epoch_seconds(timestamp: Union[int, float]) -> float:
    """
    Normalize a seconds-or-milliseconds epoch value to seconds.

    Examples:
        >>> to_epoch_seconds(1700000000000)
        1700000000.0
        >>> to_epoch_seconds(1700000000)
        1700000000.0
    """
    if timestamp < 0:
        raise ValueError(f"Timestamp cannot be negative: {timestamp}")

    if timestamp > MILLISECONDS_THRESHOLD:
        return timestamp / 1000.0
    return float(timestamp)


def to_utc_datetime(timestamp: Union[int, float]) -> datetime:
    """
    Convert a timestamp (seconds or milliseconds) to UTC datetime.

    Detection Logic:
        - If timestamp > 1e12: Assumed to be milliseconds
        - Otherwise: Assumed to be seconds

    Args:
        timestamp: Unix timestamp in seconds or milliseconds

    Returns:
        datetime: Timezone-aware datetime object in UTC

    Raises:
        ValueError: If timestamp is negative or invalid

    Examples:
        >>> to_utc_datetime(1704110400000)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)

        >>> to_utc_datetime(1704110400)
        datetime.datetime(2024, 1, 1, 12, 0, tzinfo=datetime.timezone.utc)
    """
    seconds = to_epoch_seconds(timestamp)

    try:
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OSError, OverflowError, ValueError) as e:
        raise ValueError(f"Invalid timestamp: {timestamp}. Error: {e}")


def parse_settlement_time(raw: Any) -> Optional[datetime]:
    """
    Parse a venue-reported settlement timestamp into a UTC datetime.

    Venues send the value as int, float or numeric string. Missing, zero,
    non-numeric or out-of-range values mean "unavailable" and yield None;
    no placeholder time is ever substituted.

    Examples:
        >>> parse_settlement_time("1700000000000")
        datetime.datetime(2023, 11, 14, 22, 13, 20, tzinfo=datetime.timezone.utc)
        >>> parse_settlement_time(None) is None
        True
    """
    if raw is None or isinstance(raw, bool):
        return None

    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None

    if not value > 0:
        return None

    try:
        return to_utc_datetime(value)
    except ValueError:
        return None


def format_settlement_time(moment: Optional[datetime], tz: Optional[tzinfo] = None) -> str:
    """
    Render a settlement instant as "HH:MM" in the display timezone.

    Args:
        moment: Aware datetime, or None when unavailable
        tz: Display timezone (UTC if omitted)

    Returns:
        str: "HH:MM", or "N/A" when the time is unavailable

    Example:
        >>> format_settlement_time(to_utc_datetime(1700000000), timezone.utc)
        '22:13'
    """
    if moment is None:
        return NOT_AVAILABLE

    return moment.astimezone(tz or timezone.utc).strftime("%H:%M")
