"""
API routes — JSON endpoints for the dashboard and scripts.

Blueprint: api_bp
Prefix: /api

Thin HTTP wrappers over ``ocsec.core.use_cases`` and the run store.

Endpoints:
    GET  /runs               — recent runs (``?limit=``, max 200)
    GET  /runs/<id>          — one stored run
    GET  /runs/<id>/score    — risk score of a stored run
    GET  /runs/<id>/plan     — remediation plan for a stored run
    POST /collect            — collect, score and store a new run
    GET  /compare            — diff + regressions (``?a=&b=``)
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ocsec.core.persistence.runs import RunNotFoundError
from ocsec.ui.web.helpers import app_context

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__)

MAX_RUNS_LIMIT = 200


@api_bp.errorhandler(RunNotFoundError)
def _run_not_found(e: RunNotFoundError):  # type: ignore[no-untyped-def]
    return jsonify({"error": "not_found", "id": e.run_id}), 404


# ── Runs ────────────────────────────────────────────────────────────


@api_bp.route("/runs")
def list_runs():  # type: ignore[no-untyped-def]
    """Recent runs, newest first."""
    ctx = app_context()
    limit = request.args.get("limit", ctx.settings.history_limit, type=int)
    limit = max(1, min(limit, MAX_RUNS_LIMIT))
    return jsonify({"runs": [r.summary() for r in ctx.runs.list_runs(limit=limit)]})


@api_bp.route("/runs/<run_id>")
def get_run(run_id: str):  # type: ignore[no-untyped-def]
    record = app_context().runs.get(run_id)
    return jsonify(record.model_dump(mode="json", by_alias=True))


@api_bp.route("/runs/<run_id>/score")
def run_score(run_id: str):  # type: ignore[no-untyped-def]
    from ocsec.core.services.scoring import score

    snapshot = app_context().runs.get(run_id).load_snapshot()
    return jsonify({"id": run_id, **score(snapshot).to_dict()})


@api_bp.route("/runs/<run_id>/plan")
def run_plan(run_id: str):  # type: ignore[no-untyped-def]
    from ocsec.core.services.remediation import build_plan

    ctx = app_context()
    snapshot = ctx.runs.get(run_id).load_snapshot()
    plan = build_plan(snapshot, tool_binary=ctx.settings.tool_binary)
    return jsonify(plan.to_dict())


# ── Collection ──────────────────────────────────────────────────────


@api_bp.route("/collect", methods=["POST"])
def collect():  # type: ignore[no-untyped-def]
    """Collect a snapshot now and store it."""
    from ocsec.core.use_cases.collect import run_collect

    result = run_collect(app_context())
    if result.error:
        return jsonify(result.to_dict()), 500
    return jsonify(result.to_dict()), 201


# ── Compare ─────────────────────────────────────────────────────────


@api_bp.route("/compare")
def compare():  # type: ignore[no-untyped-def]
    """Compare run ``a`` (older) with run ``b`` (default: the latest two)."""
    from ocsec.core.use_cases.compare import compare_runs

    result = compare_runs(
        app_context(),
        request.args.get("a") or None,
        request.args.get("b") or None,
    )
    if result.error:
        return jsonify(result.to_dict()), 400
    return jsonify(result.to_dict())
