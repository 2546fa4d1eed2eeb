"""
Signal normalizer — raw command results into tri-state ``SignalState``s.

Classification is a table lookup, ``(platform, signal) -> SignalRule``,
so supporting a new platform or signal is a data change. The table is
total: a pair without a rule always classifies as ``unknown``, which
keeps every surface rendering on hosts we don't understand.

Two invariants hold for every classification:
    - a failed invocation is ``unknown``, never inferred from partial text;
    - nothing but an explicit ``on`` match produces ``on``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass

from ocsec.core.models.snapshot import (
    CollectorResult,
    HostSignals,
    ListeningPorts,
    OsInfo,
    PostureSnapshot,
    SignalState,
    ToolStatus,
    now_iso,
)
from ocsec.core.services.ports import PortFormat, parse_ports

logger = logging.getLogger(__name__)

# Signal names as used in the host command table and the snapshot.
FIREWALL = "firewall"
DISK_ENCRYPTION = "diskEncryption"
AUTO_UPDATES = "autoUpdates"
BACKUPS = "backups"
LISTENING = "listening"

STATE_SIGNALS: tuple[str, ...] = (FIREWALL, DISK_ENCRYPTION, AUTO_UPDATES, BACKUPS)


@dataclass(frozen=True)
class SignalRule:
    """Patterns that classify one signal's command output.

    ``on`` is tried before ``off``; output matching neither is unknown.
    """

    on: re.Pattern[str] | None = None
    off: re.Pattern[str] | None = None

    def classify(self, text: str) -> str:
        if self.on is not None and self.on.search(text):
            return "on"
        if self.off is not None and self.off.search(text):
            return "off"
        return "unknown"


def _rx(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE | re.MULTILINE)


SIGNAL_RULES: dict[tuple[str, str], SignalRule] = {
    # socketfilterfw --getglobalstate: "Firewall is enabled. (State = 1)"
    ("darwin", FIREWALL): SignalRule(on=_rx(r"enabled"), off=_rx(r"disabled")),
    # fdesetup status: "FileVault is On."
    ("darwin", DISK_ENCRYPTION): SignalRule(on=_rx(r"FileVault is On"), off=_rx(r"\bOff\b")),
    # softwareupdate --schedule: "Automatic check is on"
    ("darwin", AUTO_UPDATES): SignalRule(on=_rx(r"\bon\b"), off=_rx(r"\boff\b")),
    # tmutil status: "Running = 1;"; idle reads as unknown
    ("darwin", BACKUPS): SignalRule(on=_rx(r"Running\s*=\s*1")),
    # ufw status: "Status: active" / "Status: inactive"
    ("linux", FIREWALL): SignalRule(on=_rx(r"Status:\s*active"), off=_rx(r"inactive")),
    # lsblk -o NAME,TYPE,MOUNTPOINT,FSTYPE: a crypt mapping or a LUKS member
    ("linux", DISK_ENCRYPTION): SignalRule(on=_rx(r"crypto_LUKS|\bcrypt\b")),
    # systemctl is-enabled unattended-upgrades
    ("linux", AUTO_UPDATES): SignalRule(on=_rx(r"^\s*enabled\b"), off=_rx(r"disabled|masked")),
}

_UNKNOWN_RULE = SignalRule()

PORT_FORMATS: dict[str, PortFormat] = {
    "darwin": "lsof",
    "linux": "ss",
}


def rule_for(platform: str, signal: str) -> SignalRule:
    """Look up the rule for a pair; unsupported pairs get an always-unknown rule."""
    return SIGNAL_RULES.get((platform, signal), _UNKNOWN_RULE)


def classify(signal: str, platform: str, result: CollectorResult | None) -> SignalState:
    """Classify one signal's raw result into a ``SignalState``.

    Args:
        signal: Signal name (``firewall``, ``diskEncryption``, ...).
        platform: Normalized platform name (``darwin``, ``linux``, ...).
        result: The invocation result, or None if nothing was collected.
    """
    if result is None:
        return SignalState(state="unknown", raw_text="")
    if not result.ok:
        return SignalState(state="unknown", raw_text=result.error or "")

    text = result.text
    state = rule_for(platform, signal).classify(text)
    logger.debug("Classified %s on %s as %s", signal, platform, state)
    return SignalState(state=state, raw_text=text)


def normalize_listening(platform: str, result: CollectorResult | None) -> ListeningPorts:
    """Parse the platform's port listing into ``ListeningPorts``."""
    if result is None:
        return ListeningPorts()
    if not result.ok:
        return ListeningPorts(tcp_ports=[], raw_text=f"ERROR: {result.error}")

    text = result.text
    fmt = PORT_FORMATS.get(platform)
    if fmt is None:
        return ListeningPorts(tcp_ports=[], raw_text=text)
    return ListeningPorts(tcp_ports=parse_ports(text, fmt), raw_text=text)


def normalize_host(os_info: OsInfo, results: Mapping[str, CollectorResult]) -> HostSignals:
    """Build ``HostSignals`` from per-signal raw results."""
    platform = os_info.platform
    return HostSignals(
        os=os_info,
        listening=normalize_listening(platform, results.get(LISTENING)),
        firewall=classify(FIREWALL, platform, results.get(FIREWALL)),
        disk_encryption=classify(DISK_ENCRYPTION, platform, results.get(DISK_ENCRYPTION)),
        auto_updates=classify(AUTO_UPDATES, platform, results.get(AUTO_UPDATES)),
        backups=classify(BACKUPS, platform, results.get(BACKUPS)),
    )


def assemble_snapshot(
    os_info: OsInfo,
    host_results: Mapping[str, CollectorResult],
    tool_status: ToolStatus,
    collected_at: str | None = None,
) -> PostureSnapshot:
    """Assemble the full posture snapshot from all signal results.

    ``collected_at`` defaults to the assembly time.
    """
    return PostureSnapshot(
        collected_at=collected_at or now_iso(),
        tool_status=tool_status,
        host=normalize_host(os_info, host_results),
    )
