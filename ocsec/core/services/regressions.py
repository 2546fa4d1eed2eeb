"""
Regression detection — security-relevant changes between two snapshots.

A fixed rule set over named fields, evaluated in declaration order.
Only a transition *away from* the good state is reported: a signal that
was already off or unknown stays quiet, and recoveries (ports closing,
the audit tool coming back) are never regressions.

Inputs may be ``PostureSnapshot`` models or stored snapshot mappings;
missing fields read as absent rather than raising, so partial or older
history entries can still be compared.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from ocsec.core.models.analysis import SEVERITY_ORDER, Regression, Severity
from ocsec.core.models.snapshot import PostureSnapshot

logger = logging.getLogger(__name__)

SnapshotLike = PostureSnapshot | Mapping[str, Any]


def _as_mapping(snapshot: SnapshotLike) -> Mapping[str, Any]:
    if isinstance(snapshot, PostureSnapshot):
        return snapshot.to_dict()
    if isinstance(snapshot, Mapping):
        return snapshot
    return {}


def _lookup(data: Mapping[str, Any], path: str) -> Any:
    """Read a dotted path, returning None for anything missing."""
    node: Any = data
    for key in path.split("."):
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return node


def _port_set(data: Mapping[str, Any]) -> list[int]:
    ports = _lookup(data, "host.listening.tcpPorts")
    if not isinstance(ports, list):
        return []
    found: list[int] = []
    for entry in ports:
        port = entry.get("port") if isinstance(entry, Mapping) else None
        if isinstance(port, int) and port not in found:
            found.append(port)
    return found


def _signal_rule(field: str, severity: Severity) -> Callable[[Mapping, Mapping], Regression | None]:
    def check(previous: Mapping[str, Any], latest: Mapping[str, Any]) -> Regression | None:
        was = _lookup(previous, f"{field}.state")
        now = _lookup(latest, f"{field}.state")
        if was != "on" or now == "on":
            return None
        return Regression(
            field=field,
            was_value="on",
            now_value=str(now) if now is not None else "missing",
            severity=severity,
        )

    return check


def _new_ports(previous: Mapping[str, Any], latest: Mapping[str, Any]) -> Regression | None:
    before = _port_set(previous)
    after = _port_set(latest)
    known = set(before)
    added = [port for port in after if port not in known]
    if not added:
        return None
    return Regression(
        field="host.listening.tcpPorts",
        was_value=str(len(before)),
        now_value=str(len(after)),
        severity="medium",
        new_ports=added,
    )


def _audit_tool(previous: Mapping[str, Any], latest: Mapping[str, Any]) -> Regression | None:
    was_ok = _lookup(previous, "toolStatus.securityAudit.ok")
    now_ok = _lookup(latest, "toolStatus.securityAudit.ok")
    if was_ok is not True or now_ok is True:
        return None
    return Regression(
        field="toolStatus.securityAudit",
        was_value="ok",
        now_value="error",
        severity="high",
    )


# Evaluated in this order; output order follows it.
REGRESSION_RULES: tuple[Callable[[Mapping, Mapping], Regression | None], ...] = (
    _signal_rule("host.firewall", "high"),
    _signal_rule("host.diskEncryption", "high"),
    _signal_rule("host.autoUpdates", "medium"),
    _new_ports,
    _audit_tool,
)


def detect_regressions(previous: SnapshotLike, latest: SnapshotLike) -> list[Regression]:
    """Compare two snapshots and return their regressions.

    Args:
        previous: The older snapshot.
        latest: The newer snapshot.

    Returns:
        Regressions in rule-declaration order (not severity order).
    """
    before = _as_mapping(previous)
    after = _as_mapping(latest)

    found: list[Regression] = []
    for rule in REGRESSION_RULES:
        regression = rule(before, after)
        if regression is not None:
            found.append(regression)

    if found:
        logger.info("Detected %d regression(s)", len(found))
    return found


def highest_severity(regressions: list[Regression]) -> Severity | None:
    """The most severe level present, or None for no regressions."""
    if not regressions:
        return None
    return min((r.severity for r in regressions), key=lambda s: SEVERITY_ORDER[s])
