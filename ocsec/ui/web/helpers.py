"""
Web shared helpers.

Used across route blueprints to reach the application context.
"""

from __future__ import annotations

from flask import current_app

from ocsec.core.context import AppContext


def app_context() -> AppContext:
    """The AppContext the app was created with."""
    return current_app.config["OCSEC_CONTEXT"]
