"""
UI package for Coachboard.

This package contains the Flask web server exposing the JSON API.
"""
from .web_app import WebAppState, create_app, run_web_app

__all__ = ["WebAppState", "create_app", "run_web_app"]
