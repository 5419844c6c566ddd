"""
Core Utilities Package

This package contains utility functions and helpers used throughout the application.

Modules:
    - time: Timestamp conversion and settlement-time formatting
"""

from core.utils.time import (
    to_utc_datetime,
    parse_settlement_time,
    format_settlement_time,
)

__all__ = ["to_utc_datetime", "parse_settlement_time", "format_settlement_time"]
