#!/usr/bin/env python3
"""
Main entry point for the Coachboard web application.

This script launches the Flask-based web server. Match sheets are stored
as JSON documents in the directory named by COACHBOARD_DATA_DIR.
"""
import logging
import os

from coachboard.ui.web_app import run_web_app
from coachboard.utils import DEFAULT_DATA_DIR, DEFAULT_HOST, DEFAULT_PORT

if __name__ == "__main__":
    logging.basicConfig(
        level=os.environ.get("COACHBOARD_LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    data_dir = os.environ.get("COACHBOARD_DATA_DIR", DEFAULT_DATA_DIR)
    run_web_app(
        host=os.environ.get("COACHBOARD_HOST", DEFAULT_HOST),
        port=int(os.environ.get("COACHBOARD_PORT", DEFAULT_PORT)),
        data_dir=data_dir,
    )
