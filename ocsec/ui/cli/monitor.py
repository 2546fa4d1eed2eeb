"""
CLI commands for scheduled monitoring.

``monitor cron`` prints a crontab line; ``monitor check`` compares the
two most recent runs and exits non-zero on regressions, so the pair
works as a cron job plus an alerting probe.
"""

from __future__ import annotations

import json
import shutil
import sys

import click

from ocsec.ui.cli.common import echo_regressions, get_context


@click.group()
def monitor() -> None:
    """Monitoring — cron scheduling and regression checks."""


@monitor.command("cron")
@click.option("--every", "every_minutes", default=60, type=int, show_default=True,
              help="Collection interval in minutes.")
@click.option("--log", "log_path", default=None, help="Append collector output to this file.")
def cron(every_minutes: int, log_path: str | None) -> None:
    """Print a crontab entry for periodic collection."""
    from ocsec.core.services.schedule import cron_line

    program = shutil.which("ocsec") or "ocsec"
    try:
        line = cron_line(every_minutes, program, log_path)
    except ValueError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    click.echo(line)


@monitor.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Check the latest run against the previous one (exit 1 on regressions)."""
    from ocsec.core.use_cases.compare import compare_runs

    app = get_context(ctx)
    result = compare_runs(app)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.error:
        click.secho(f"⚠️  {result.error}", fg="yellow")
    else:
        echo_regressions(result.regressions)

    if result.regressions:
        sys.exit(1)
