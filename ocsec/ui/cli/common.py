"""
Shared CLI helpers — context resolution and rendering of core results.
"""

from __future__ import annotations

import sys

import click

from ocsec.core.context import AppContext
from ocsec.core.models.analysis import Regression, RiskScore

SEVERITY_COLORS = {"high": "red", "medium": "yellow", "low": "white"}
STATE_COLORS = {"on": "green", "off": "red", "unknown": "yellow"}


def get_context(ctx: click.Context, mock: bool = False) -> AppContext:
    """Build the application context for a command.

    A command source placed in ``ctx.obj["source"]`` (tests) wins over
    ``--mock`` and the real shell.
    """
    from ocsec.core.config.loader import ConfigError, load_settings
    from ocsec.core.context import build_context

    try:
        settings = load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    return build_context(settings, source=ctx.obj.get("source"), mock=mock)


def echo_risk(risk: RiskScore) -> None:
    """Print a score and its severity-ranked deductions."""
    color = "green" if risk.score >= 80 else "yellow" if risk.score >= 40 else "red"
    click.secho(f"   Risk score: {risk.score}/100 ({risk.label})", fg=color, bold=True)
    if not risk.deductions:
        click.secho("   All checks passed. No remediations needed.", fg="green")
        return
    for d in risk.deductions:
        click.secho(f"     [{d.severity}] ", fg=SEVERITY_COLORS[d.severity], nl=False)
        click.echo(f"{d.reason} ({d.points} pts)")


def echo_regressions(regressions: list[Regression]) -> None:
    if not regressions:
        click.secho("   ✅ No regressions", fg="green")
        return
    click.secho(f"   🚨 {len(regressions)} regression(s):", fg="red", bold=True)
    for r in regressions:
        click.secho(f"     [{r.severity}] ", fg=SEVERITY_COLORS[r.severity], nl=False)
        detail = f"{r.field}: {r.was_value} → {r.now_value}"
        if r.new_ports:
            detail += f" (new: {', '.join(str(p) for p in r.new_ports)})"
        click.echo(detail)
