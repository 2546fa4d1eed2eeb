"""
CLI commands for stored run history.

Thin wrappers over ``ocsec.core.persistence.runs``.
"""

from __future__ import annotations

import json
import sys

import click

from ocsec.ui.cli.common import echo_risk, get_context


@click.group()
def runs() -> None:
    """Run history — list and inspect stored snapshots."""


@runs.command("list")
@click.option("--limit", "-n", default=None, type=int, help="Maximum runs to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_runs(ctx: click.Context, limit: int | None, as_json: bool) -> None:
    """List stored runs, newest first."""
    app = get_context(ctx)
    records = app.runs.list_runs(limit=limit or app.settings.history_limit)

    if as_json:
        click.echo(json.dumps({"runs": [r.summary() for r in records]}, indent=2))
        return

    if not records:
        click.secho("No runs stored yet. Run: ocsec collect", fg="yellow")
        return

    click.secho(f"📜 Runs ({len(records)}):", fg="cyan", bold=True)
    for record in records:
        click.echo(f"   {record.id}  {record.collected_at}")


@runs.command("show")
@click.argument("run_id")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def show_run(ctx: click.Context, run_id: str, as_json: bool) -> None:
    """Show one stored run."""
    from ocsec.core.persistence.runs import RunNotFoundError
    from ocsec.core.services.scoring import score

    app = get_context(ctx)
    try:
        record = app.runs.get(run_id)
    except RunNotFoundError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(record.model_dump(mode="json", by_alias=True), indent=2))
        return

    snapshot = record.load_snapshot()
    click.secho(f"\n📋 Run {record.id}", fg="cyan", bold=True)
    click.echo(f"   Collected: {record.collected_at}")
    click.echo(f"   Platform:  {snapshot.host.os.platform} {snapshot.host.os.release}")
    echo_risk(score(snapshot))
    click.echo()
