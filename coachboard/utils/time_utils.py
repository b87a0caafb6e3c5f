"""
Utility functions for the Coachboard application.

This module contains common time helpers used throughout the application.
"""
import time
from datetime import datetime
from typing import Optional


def now_ts() -> float:
    """
    Get current timestamp in epoch seconds.

    Returns:
        Current time as floating point epoch seconds
    """
    return time.time()


def fmt_ts(ts: Optional[float]) -> str:
    """
    Format an epoch timestamp as an ISO-8601 string (seconds precision).

    Example:
        >>> fmt_ts(None)
        ''
    """
    if ts is None:
        return ""
    return datetime.fromtimestamp(ts).isoformat(timespec="seconds")
