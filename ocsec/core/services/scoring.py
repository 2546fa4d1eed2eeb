"""Risk scoring — weighted deductions from a perfect 100."""

from __future__ import annotations

import logging

from ocsec.core.models.analysis import Deduction, RiskScore, severity_for_points
from ocsec.core.models.snapshot import PostureSnapshot

logger = logging.getLogger(__name__)

# Scoring policy. Tuned by product, not derived; changing a value here
# is a policy change, not a bug fix.
BASE_SCORE = 100
FIREWALL_OFF_POINTS = -30
FIREWALL_UNKNOWN_POINTS = -15
DISK_ENCRYPTION_OFF_POINTS = -25
DISK_ENCRYPTION_UNKNOWN_POINTS = -10
AUTO_UPDATES_OFF_POINTS = -15
AUTO_UPDATES_UNKNOWN_POINTS = -5
OPEN_PORTS_POINTS = -10
PORT_COUNT_THRESHOLD = 5
SECURITY_AUDIT_FAILED_POINTS = -20
UPDATE_STATUS_FAILED_POINTS = -5

# (host attribute, off points, off reason, unknown points, unknown reason)
_SIGNAL_DEDUCTIONS = (
    ("firewall", FIREWALL_OFF_POINTS, "Host firewall is off",
     FIREWALL_UNKNOWN_POINTS, "Host firewall state unknown"),
    ("disk_encryption", DISK_ENCRYPTION_OFF_POINTS, "Disk encryption is off",
     DISK_ENCRYPTION_UNKNOWN_POINTS, "Disk encryption state unknown"),
    ("auto_updates", AUTO_UPDATES_OFF_POINTS, "Auto-updates are off",
     AUTO_UPDATES_UNKNOWN_POINTS, "Auto-updates state unknown"),
)

__all__ = [
    "PORT_COUNT_THRESHOLD",
    "score",
    "severity_for_points",
]


def _deductions(snapshot: PostureSnapshot) -> list[Deduction]:
    host = snapshot.host
    found: list[Deduction] = []

    for attr, off_points, off_reason, unknown_points, unknown_reason in _SIGNAL_DEDUCTIONS:
        state = getattr(host, attr).state
        if state == "off":
            found.append(Deduction(reason=off_reason, points=off_points))
        elif state == "unknown":
            found.append(Deduction(reason=unknown_reason, points=unknown_points))

    port_count = len(host.listening.tcp_ports)
    if port_count > PORT_COUNT_THRESHOLD:
        found.append(Deduction(
            reason=f"{port_count} listening ports (>{PORT_COUNT_THRESHOLD})",
            points=OPEN_PORTS_POINTS,
        ))

    tools = snapshot.tool_status
    if not tools.security_audit.ok:
        found.append(Deduction(
            reason="Security audit has errors",
            points=SECURITY_AUDIT_FAILED_POINTS,
        ))
    if not tools.update_status.ok:
        found.append(Deduction(
            reason="Update status check failed",
            points=UPDATE_STATUS_FAILED_POINTS,
        ))

    return found


def score(snapshot: PostureSnapshot) -> RiskScore:
    """Compute the risk score for a snapshot.

    Returns:
        RiskScore with ``score`` clamped to 0..100 and deductions sorted
        most severe first (ties keep evaluation order).
    """
    deductions = _deductions(snapshot)
    total = BASE_SCORE + sum(d.points for d in deductions)
    clamped = max(0, min(BASE_SCORE, total))
    logger.debug("Score %d (%d deductions, raw %d)", clamped, len(deductions), total)
    return RiskScore(
        score=clamped,
        deductions=sorted(deductions, key=lambda d: d.points),
    )
