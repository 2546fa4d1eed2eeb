"""
Page routes — serves the dashboard HTML.

GET / renders the latest run. With an empty history it collects one
first, so a fresh install never shows a blank page.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, render_template

from ocsec.ui.web.helpers import app_context

logger = logging.getLogger(__name__)

pages_bp = Blueprint("pages", __name__)

RECENT_RUNS = 10


@pages_bp.route("/")
def dashboard():  # type: ignore[no-untyped-def]
    """Render the main dashboard."""
    from ocsec.core.services.scoring import score
    from ocsec.core.use_cases.collect import run_collect

    ctx = app_context()
    recent = ctx.runs.list_runs(limit=RECENT_RUNS)
    error = None

    if recent:
        latest = recent[0]
        snapshot = latest.load_snapshot()
        run_id = latest.id
    else:
        logger.info("No stored runs, collecting one for the dashboard")
        result = run_collect(ctx)
        snapshot, run_id, error = result.snapshot, result.run_id, result.error
        recent = ctx.runs.list_runs(limit=RECENT_RUNS)

    return render_template(
        "dashboard.html",
        snapshot=snapshot,
        run_id=run_id,
        risk=score(snapshot),
        runs=recent,
        error=error,
        mock_mode=current_app.config["MOCK_MODE"],
    )
