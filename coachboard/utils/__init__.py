"""
Utilities package for the Coachboard application.

This package contains utility functions and constants used throughout the application.
"""
from .time_utils import fmt_ts, now_ts
from .constants import (
    APP_TITLE, QUARTERS, QUARTER_LABELS, FIELD_SLOTS, MIN_CALL_UPS,
    FAIRNESS_THRESHOLD_PERIODS, DEFAULT_HISTORY_SIZE, DEFAULT_HOST, DEFAULT_PORT,
    DEFAULT_DATA_DIR
)

__all__ = [
    "fmt_ts", "now_ts", "APP_TITLE", "QUARTERS", "QUARTER_LABELS",
    "FIELD_SLOTS", "MIN_CALL_UPS", "FAIRNESS_THRESHOLD_PERIODS",
    "DEFAULT_HISTORY_SIZE", "DEFAULT_HOST", "DEFAULT_PORT", "DEFAULT_DATA_DIR"
]
