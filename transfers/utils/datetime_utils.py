"""
Datetime utility functions.
"""

from datetime import datetime
import pytz


def utcnow() -> datetime:
    """
    Get current UTC datetime using pytz.UTC.

    Returns:
        Current UTC datetime with pytz timezone information
    """
    return datetime.now(pytz.UTC)


def isoformat_or_none(value) -> str:
    """Serialize an optional datetime for API payloads."""
    return value.isoformat() if value else None
