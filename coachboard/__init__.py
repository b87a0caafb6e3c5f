"""
Coachboard

Quarter lineup allocation, substitution and outcome tracking for youth
soccer matches played in four quarters with seven field slots.

This package provides the lineup and outcome services plus a Flask JSON
API for coaches to manage their match sheets.
"""
from .models import Fraction, Match, MatchSheet, Player
from .services import ServiceFactory, JsonMatchRepository, InMemoryMatchRepository
from .ui import create_app, run_web_app
from .utils import now_ts, APP_TITLE

__version__ = "1.0.0"
__author__ = "Coachboard Development Team"

__all__ = [
    "Fraction", "Match", "MatchSheet", "Player", "ServiceFactory",
    "JsonMatchRepository", "InMemoryMatchRepository", "create_app",
    "run_web_app", "now_ts", "APP_TITLE"
]
