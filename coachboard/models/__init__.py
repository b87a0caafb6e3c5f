"""
Models package for the Coachboard application.

This package contains the core data models used throughout the application.
"""
from .fraction import Fraction
from .match import Match, Player
from .match_sheet import (
    FieldOccupancy, GoalEvent, MatchScore, MatchSheet, QuarterResult,
    Substitution, result_label
)
from .match_report import FormationSnapshot, MatchReport, PlayerMatchSummary

__all__ = [
    "Fraction", "Match", "Player", "FieldOccupancy", "GoalEvent", "MatchScore",
    "MatchSheet", "QuarterResult", "Substitution", "result_label",
    "FormationSnapshot", "MatchReport", "PlayerMatchSummary"
]
