"""
Constants for the Coachboard match lineup engine.

This module contains configuration constants used throughout the application.
"""

# Application metadata
APP_TITLE = "Coachboard"

# Match structure (quarters are fixed, never configurable per match)
QUARTERS = (1, 2, 3, 4)
QUARTER_LABELS = {
    1: "Q1",
    2: "Q2",
    3: "Q3",
    4: "Q4",
}

# Field configuration (7-a-side youth format)
FIELD_SLOTS = 7        # simultaneous on-field positions per quarter
MIN_CALL_UPS = 7       # call-ups required before any lineup edit

# Playing time fairness
FAIRNESS_THRESHOLD_PERIODS = 0.5   # +/- half a quarter regarded as notable variance

# Command history
DEFAULT_HISTORY_SIZE = 50

# Web server defaults
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 7122
DEFAULT_DATA_DIR = "match_data"
