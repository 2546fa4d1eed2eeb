"""
ocsec — CLI entrypoint.

Usage:
    ocsec --help
    ocsec collect
    ocsec plan
    ocsec regressions
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from ocsec import __version__
from ocsec.core.observability.logging_config import (
    ENV_FILE,
    ENV_FILE_LEVEL,
    resolve_level,
    setup_logging,
)
from ocsec.ui.cli.common import STATE_COLORS, echo_regressions, echo_risk, get_context

_FAIL_LEVELS = {"high": ("high",), "medium": ("high", "medium"), "low": ("high", "medium", "low")}


@click.group()
@click.version_option(version=__version__, prog_name="ocsec")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to ocsec.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Host Security Posture Center — collect, score and compare security snapshots."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug, verbose, quiet, os.environ),
        log_file=os.environ.get(ENV_FILE),
        log_file_level=os.environ.get(ENV_FILE_LEVEL),
        quiet_third_party=not debug,
    )


def _echo_snapshot_summary(snapshot) -> None:  # type: ignore[no-untyped-def]
    host = snapshot.host
    click.echo(f"   Platform: {host.os.platform} {host.os.release} ({host.os.arch})")
    for label, signal in (
        ("Firewall", host.firewall),
        ("Disk encryption", host.disk_encryption),
        ("Auto-updates", host.auto_updates),
        ("Backups", host.backups),
    ):
        click.echo(f"   {label:<16}", nl=False)
        click.secho(signal.state, fg=STATE_COLORS[signal.state])
    ports = ", ".join(str(p) for p in snapshot.port_numbers) or "none"
    click.echo(f"   Listening TCP:  {ports}")
    audit = snapshot.tool_status.security_audit
    click.echo("   Security audit: ", nl=False)
    click.secho("ok" if audit.ok else "error", fg="green" if audit.ok else "red")


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--no-store", is_flag=True, help="Don't save the snapshot to run history.")
@click.option("--mock", is_flag=True, help="Use mock command source (no real commands).")
@click.pass_context
def collect(ctx: click.Context, as_json: bool, no_store: bool, mock: bool) -> None:
    """Collect tool + host security signals."""
    from ocsec.core.use_cases.collect import run_collect

    app = get_context(ctx, mock=mock)
    result = run_collect(app, store=not no_store)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    assert result.snapshot is not None and result.risk is not None
    if not ctx.obj.get("quiet"):
        click.secho(f"\n🔍 Snapshot {result.snapshot.collected_at}", fg="cyan", bold=True)
        _echo_snapshot_summary(result.snapshot)
        click.echo()
        echo_risk(result.risk)

    if result.error:
        click.secho(f"❌ {result.error}", fg="red")
        sys.exit(1)

    if result.run and not ctx.obj.get("quiet"):
        click.secho(f"\n   💾 Stored as run {result.run.id}", fg="cyan")
    click.echo()


def _load_run_snapshot(app, run_id: str | None):  # type: ignore[no-untyped-def]
    """Stored snapshot by id, or the most recent one; exits on failure."""
    from ocsec.core.persistence.runs import RunNotFoundError

    if run_id is None:
        recent = app.runs.list_runs(limit=1)
        if not recent:
            click.secho("❌ No runs stored yet. Run: ocsec collect", fg="red")
            sys.exit(1)
        return recent[0].load_snapshot()
    try:
        return app.runs.get(run_id).load_snapshot()
    except RunNotFoundError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


@cli.command("score")
@click.argument("run_id", required=False)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def score_cmd(ctx: click.Context, run_id: str | None, as_json: bool) -> None:
    """Score a stored run (default: the most recent)."""
    from ocsec.core.services.scoring import score

    app = get_context(ctx)
    snapshot = _load_run_snapshot(app, run_id)
    risk = score(snapshot)

    if as_json:
        click.echo(json.dumps(risk.to_dict(), indent=2))
        return

    click.secho(f"\n🛡  Snapshot {snapshot.collected_at}", fg="cyan", bold=True)
    echo_risk(risk)
    click.echo()


def _plan_for(ctx: click.Context, run_id: str | None, mock: bool):  # type: ignore[no-untyped-def]
    from ocsec.core.services.collector import collect_all
    from ocsec.core.services.remediation import build_plan

    app = get_context(ctx, mock=mock)
    if run_id:
        snapshot = _load_run_snapshot(app, run_id)
    else:
        snapshot = collect_all(app.source, app.settings)
    return app, build_plan(snapshot, tool_binary=app.settings.tool_binary)


@cli.command()
@click.option("--run", "run_id", default=None, help="Plan from a stored run instead of a fresh collection.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--mock", is_flag=True, help="Use mock command source (no real commands).")
@click.pass_context
def plan(ctx: click.Context, run_id: str | None, as_json: bool, mock: bool) -> None:
    """Generate a numbered remediation plan (no changes)."""
    _app, remediation = _plan_for(ctx, run_id, mock)

    if as_json:
        click.echo(json.dumps(remediation.to_dict(), indent=2))
        return

    click.secho(f"\n🧭 Remediation plan ({remediation.total_steps} steps)", fg="cyan", bold=True)
    click.echo(f"   {remediation.notes}")
    for step in remediation.steps:
        click.echo()
        click.secho(f"   {step.n}. {step.title}", bold=True)
        click.echo(f"      run:      {step.command}")
        click.echo(f"      rollback: {step.rollback}")
        if step.notes:
            click.secho(f"      note:     {step.notes}", fg="yellow")
    click.echo()


@cli.command()
@click.option("--run", "run_id", default=None, help="Plan from a stored run instead of a fresh collection.")
@click.option("--dry-run", is_flag=True, help="Confirm steps but run nothing.")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Confirm every step without asking.")
@click.option("--mock", is_flag=True, help="Use mock command source (no real commands).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output report as JSON.")
@click.pass_context
def apply(
    ctx: click.Context,
    run_id: str | None,
    dry_run: bool,
    assume_yes: bool,
    mock: bool,
    as_json: bool,
) -> None:
    """Apply the remediation plan with explicit confirmation per step."""
    from ocsec.core.use_cases.apply import apply_plan

    app, remediation = _plan_for(ctx, run_id, mock)

    def confirm(step) -> bool:  # type: ignore[no-untyped-def]
        if assume_yes:
            return True
        click.echo()
        click.secho(f"   {step.n}. {step.title}", bold=True)
        click.echo(f"      run:      {step.command}")
        click.echo(f"      rollback: {step.rollback}")
        if step.notes:
            click.secho(f"      note:     {step.notes}", fg="yellow")
        return click.confirm("      Apply this step?", default=False)

    report = apply_plan(app, remediation, confirm, dry_run=dry_run)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo()
        icons = {"ok": ("✓", "green"), "failed": ("✗", "red"), "declined": ("⊘", "yellow"),
                 "skipped": ("⊘", "white")}
        for outcome in report.outcomes:
            icon, color = icons[outcome.status]
            click.secho(f"   {icon} {outcome.step.n}. {outcome.step.title} ", fg=color, nl=False)
            click.echo(f"({outcome.status})")
            if outcome.error:
                click.echo(f"     │ {outcome.error}")
        click.echo()
        click.echo(f"   Audit log: {app.audit.path}")

    if report.failed:
        sys.exit(1)


@cli.command("diff")
@click.argument("previous", type=click.Path(exists=True, dir_okay=False))
@click.argument("latest", type=click.Path(exists=True, dir_okay=False))
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def diff_cmd(previous: str, latest: str, as_json: bool) -> None:
    """Diff two snapshot JSON files (older first)."""
    from ocsec.core.use_cases.compare import SnapshotFileError, compare_files

    try:
        result = compare_files(Path(previous), Path(latest))
    except SnapshotFileError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    markers = {"added": ("+", "green"), "removed": ("-", "red"), "changed": ("~", "yellow")}
    if not result.changes:
        click.secho("   No differences", fg="green")
    for change in result.changes:
        marker, color = markers[change.kind]
        click.secho(f"   {marker} {change.path}", fg=color)
    click.echo()
    echo_regressions(result.regressions)


@cli.command()
@click.argument("previous_id", required=False)
@click.argument("latest_id", required=False)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option(
    "--fail-on",
    type=click.Choice(["high", "medium", "low", "never"]),
    default="high",
    show_default=True,
    help="Exit 1 when a regression at or above this severity is found.",
)
@click.pass_context
def regressions(
    ctx: click.Context,
    previous_id: str | None,
    latest_id: str | None,
    as_json: bool,
    fail_on: str,
) -> None:
    """Detect regressions between two stored runs (default: the latest two)."""
    from ocsec.core.persistence.runs import RunNotFoundError
    from ocsec.core.use_cases.compare import compare_runs

    app = get_context(ctx)
    try:
        result = compare_runs(app, previous_id, latest_id)
    except RunNotFoundError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif result.error:
        click.secho(f"⚠️  {result.error}", fg="yellow")
    else:
        click.secho(f"\n🔁 {result.previous_at} → {result.latest_at}", fg="cyan", bold=True)
        echo_regressions(result.regressions)
        click.echo()

    if result.error:
        sys.exit(1)
    if any(r.severity in _FAIL_LEVELS.get(fail_on, ()) for r in result.regressions):
        sys.exit(1)


@cli.command()
@click.option("--host", default=None, help="Bind address (default: from settings).")
@click.option("--port", "-p", default=None, type=int, help="Port number (default: from settings).")
@click.option("--mock", is_flag=True, help="Use mock command source (no real commands).")
@click.pass_context
def web(ctx: click.Context, host: str | None, port: int | None, mock: bool) -> None:
    """Start the local dashboard server."""
    from ocsec.ui.web.server import create_app, run_server

    app_ctx = get_context(ctx, mock=mock)
    host = host or app_ctx.settings.server.host
    port = port or app_ctx.settings.server.port
    app = create_app(app_ctx)

    click.echo()
    click.secho("🛡  ocsec — Security Center", bold=True)
    click.echo(f"   Dashboard: http://{host}:{port}")
    click.echo(f"   History:   {app_ctx.runs.path}")
    if mock:
        click.secho("   Mode: mock (no real commands)", fg="yellow")
    click.echo()

    run_server(app, host=host, port=port, debug=ctx.obj.get("debug", False))


# ── Register sub-command groups from ocsec/ui/cli/ ────────────────

from ocsec.ui.cli.monitor import monitor  # noqa: E402
from ocsec.ui.cli.runs import runs  # noqa: E402

cli.add_command(runs)
cli.add_command(monitor)


if __name__ == "__main__":
    cli()
