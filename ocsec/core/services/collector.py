"""
Signal collection — run every check concurrently and assemble a snapshot.

Flow:
    detect OS → fan out (tool status ∥ host signals) → join → normalize → snapshot

Host checks are read-only and independent, so each runs in its own
worker; each worker owns its result slot and slots are merged only
after all have settled. Every command is bounded by the configured
timeout, and a slow or failing check only ever degrades its own slot.
"""

from __future__ import annotations

import json
import logging
import platform as _platform
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from ocsec.adapters.base import CommandSource, Invocation
from ocsec.core.models.settings import Settings
from ocsec.core.models.snapshot import (
    CollectorResult,
    OsInfo,
    PostureSnapshot,
    ToolStatus,
)
from ocsec.core.services.signals import (
    AUTO_UPDATES,
    BACKUPS,
    DISK_ENCRYPTION,
    FIREWALL,
    LISTENING,
    assemble_snapshot,
)

logger = logging.getLogger(__name__)

# platform → signal → argv
HOST_COMMANDS: dict[str, dict[str, list[str]]] = {
    "darwin": {
        LISTENING: ["lsof", "-nP", "-iTCP", "-sTCP:LISTEN"],
        FIREWALL: ["/usr/libexec/ApplicationFirewall/socketfilterfw", "--getglobalstate"],
        DISK_ENCRYPTION: ["fdesetup", "status"],
        AUTO_UPDATES: ["softwareupdate", "--schedule"],
        BACKUPS: ["tmutil", "status"],
    },
    "linux": {
        LISTENING: ["ss", "-ltnp"],
        FIREWALL: ["ufw", "status"],
        DISK_ENCRYPTION: ["lsblk", "-o", "NAME,TYPE,MOUNTPOINT,FSTYPE"],
        AUTO_UPDATES: ["systemctl", "is-enabled", "unattended-upgrades"],
    },
}

# ToolStatus attribute → agent CLI arguments
TOOL_COMMANDS: dict[str, list[str]] = {
    "security_audit": ["security", "audit", "--deep", "--json"],
    "update_status": ["update", "status"],
    "status_deep": ["status", "--deep"],
}

_JSON_RESULTS = frozenset({"security_audit"})


def detect_os_info() -> OsInfo:
    """Describe the running host (platform names as ``sys.platform`` spells them)."""
    return OsInfo(
        platform=_platform.system().lower() or "unknown",
        release=_platform.release(),
        arch=_platform.machine(),
    )


def _invocation(argv: list[str], settings: Settings) -> Invocation:
    return Invocation(cmd=argv[0], args=argv[1:], timeout_s=settings.command_timeout_s)


def _safe_run(source: CommandSource, invocation: Invocation) -> CollectorResult:
    try:
        return source.run(invocation)
    except Exception as e:
        # Sources should never raise, but one bad check must not sink the rest
        logger.error("Source %s raised for %s: %s", source.name, invocation.display, e)
        return CollectorResult.failure(f"Unexpected error: {e}", command=invocation.display)


def _as_json(result: CollectorResult) -> CollectorResult:
    """Re-interpret a text result as a JSON document."""
    if not result.ok:
        return result
    try:
        value: Any = json.loads(result.value or "null")
    except json.JSONDecodeError as e:
        return CollectorResult.failure(f"Failed to parse JSON: {e}", raw=result.value)
    if value is None:
        return CollectorResult.failure("Empty JSON document", raw=result.value)
    return CollectorResult.success(value, **result.meta)


def _run_all(
    source: CommandSource,
    invocations: dict[str, Invocation],
) -> dict[str, CollectorResult]:
    if not invocations:
        return {}
    with ThreadPoolExecutor(max_workers=len(invocations)) as pool:
        futures = {
            key: pool.submit(_safe_run, source, inv)
            for key, inv in invocations.items()
        }
        return {key: future.result() for key, future in futures.items()}


def collect_tool_status(source: CommandSource, settings: Settings) -> ToolStatus:
    """Run the agent CLI checks and wrap their results."""
    invocations = {
        attr: _invocation([settings.tool_binary, *args], settings)
        for attr, args in TOOL_COMMANDS.items()
    }
    results = _run_all(source, invocations)
    for attr in _JSON_RESULTS:
        results[attr] = _as_json(results[attr])
    return ToolStatus(**results)


def collect_host_results(
    source: CommandSource,
    settings: Settings,
    os_info: OsInfo,
) -> dict[str, CollectorResult]:
    """Run every host check for the platform; unsupported platforms run none."""
    commands = HOST_COMMANDS.get(os_info.platform, {})
    if not commands:
        logger.info("No host checks for platform '%s'", os_info.platform)
    invocations = {signal: _invocation(argv, settings) for signal, argv in commands.items()}
    return _run_all(source, invocations)


def collect_all(
    source: CommandSource,
    settings: Settings,
    os_info: OsInfo | None = None,
) -> PostureSnapshot:
    """Collect a full posture snapshot.

    Tool-status and host-signal collection run concurrently and are
    joined before assembly. If either collector fails unexpectedly its
    half degrades to "not collected"/unknown instead of failing the run.

    Args:
        source: Where commands are executed.
        settings: Timeouts and tool binary name.
        os_info: Host description (default: the running host).
    """
    os_info = os_info or detect_os_info()
    logger.info("Collecting posture snapshot (%s, via %s)", os_info.platform, source.name)

    with ThreadPoolExecutor(max_workers=2) as pool:
        tool_future = pool.submit(collect_tool_status, source, settings)
        host_future = pool.submit(collect_host_results, source, settings, os_info)

        try:
            tool_status = tool_future.result()
        except Exception as e:
            logger.error("Tool status collection failed: %s", e)
            tool_status = ToolStatus()

        try:
            host_results = host_future.result()
        except Exception as e:
            logger.error("Host signal collection failed: %s", e)
            host_results = {}

    return assemble_snapshot(os_info, host_results, tool_status)
