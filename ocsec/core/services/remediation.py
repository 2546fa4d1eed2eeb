"""
Remediation planner — off/unknown signals into numbered, reversible steps.

The plan is derived purely from a snapshot; building one changes nothing.
Host commands come from a ``(platform, signal)`` table mirroring the
normalizer's rule table. Pairs without an entry produce no step: we only
suggest commands we know to be correct for that platform.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ocsec.core.models.remediation import RemediationPlan, RemediationStep
from ocsec.core.models.snapshot import PostureSnapshot
from ocsec.core.services.signals import (
    AUTO_UPDATES,
    BACKUPS,
    DISK_ENCRYPTION,
    FIREWALL,
    STATE_SIGNALS,
)

logger = logging.getLogger(__name__)

DEFAULT_TOOL_BINARY = "openclaw"

_SOCKETFILTERFW = "/usr/libexec/ApplicationFirewall/socketfilterfw"


@dataclass(frozen=True)
class RemediationTemplate:
    title: str
    command: str
    rollback: str
    check: str                  # read-only command that shows the current state
    caveats: str | None = None


REMEDIATIONS: dict[tuple[str, str], RemediationTemplate] = {
    ("darwin", FIREWALL): RemediationTemplate(
        title="Enable host firewall (recommended)",
        command=f"sudo {_SOCKETFILTERFW} --setglobalstate on",
        rollback=f"sudo {_SOCKETFILTERFW} --setglobalstate off",
        check=f"{_SOCKETFILTERFW} --getglobalstate",
    ),
    ("darwin", DISK_ENCRYPTION): RemediationTemplate(
        title="Enable FileVault disk encryption",
        command="sudo fdesetup enable",
        rollback="sudo fdesetup disable",
        check="fdesetup status",
        caveats=(
            "Prompts for a user password and prints a recovery key; store the key "
            "before continuing. Encryption continues in the background."
        ),
    ),
    ("darwin", AUTO_UPDATES): RemediationTemplate(
        title="Turn on automatic update checks",
        command="sudo softwareupdate --schedule on",
        rollback="sudo softwareupdate --schedule off",
        check="softwareupdate --schedule",
    ),
    ("darwin", BACKUPS): RemediationTemplate(
        title="Enable Time Machine backups",
        command="sudo tmutil enable",
        rollback="sudo tmutil disable",
        check="tmutil status",
        caveats="Needs a backup destination; set one with `sudo tmutil setdestination`.",
    ),
    ("linux", FIREWALL): RemediationTemplate(
        title="Enable host firewall (recommended)",
        command="sudo ufw enable",
        rollback="sudo ufw disable",
        check="sudo ufw status",
        caveats="On a remote session run `sudo ufw allow OpenSSH` first or the connection drops.",
    ),
    ("linux", AUTO_UPDATES): RemediationTemplate(
        title="Enable unattended security upgrades",
        command="sudo systemctl enable --now unattended-upgrades",
        rollback="sudo systemctl disable --now unattended-upgrades",
        check="systemctl is-enabled unattended-upgrades",
        caveats="Debian/Ubuntu only; install the unattended-upgrades package if it is missing.",
    ),
}

_SIGNAL_ATTRS = {
    FIREWALL: "firewall",
    DISK_ENCRYPTION: "disk_encryption",
    AUTO_UPDATES: "auto_updates",
    BACKUPS: "backups",
}


def _tool_step(tool_binary: str) -> RemediationStep:
    return RemediationStep(
        n=1,
        title="Tighten agent defaults (safe fix)",
        command=f"{tool_binary} security audit --fix",
        rollback=f"{tool_binary} security audit --deep",
        notes=(
            "Only touches the agent's own config and file permissions. It does NOT "
            "change firewall, SSH or OS updates. Rollback re-runs the audit to confirm; "
            "revert config by hand if needed."
        ),
    )


def _host_step(n: int, signal: str, state: str, template: RemediationTemplate) -> RemediationStep:
    notes = template.caveats
    if state == "unknown":
        confirm = f"Current state could not be determined; check with `{template.check}` first."
        notes = f"{confirm} {notes}" if notes else confirm
    return RemediationStep(
        n=n,
        title=template.title,
        signal=signal,
        command=template.command,
        rollback=template.rollback,
        notes=notes,
    )


def build_plan(snapshot: PostureSnapshot, tool_binary: str = DEFAULT_TOOL_BINARY) -> RemediationPlan:
    """Build the ordered remediation plan for a snapshot.

    Step 1 is always the agent tool's own safe fix; host steps follow
    in signal order (firewall, disk encryption, auto-updates, backups)
    for every signal that is off or unknown.
    """
    platform = snapshot.platform
    steps = [_tool_step(tool_binary)]

    for signal in STATE_SIGNALS:
        state = getattr(snapshot.host, _SIGNAL_ATTRS[signal]).state
        if state == "on":
            continue
        template = REMEDIATIONS.get((platform, signal))
        if template is None:
            logger.debug("No remediation for %s on %s", signal, platform)
            continue
        steps.append(_host_step(len(steps) + 1, signal, state, template))

    return RemediationPlan(collected_at=snapshot.collected_at, steps=steps)
