"""
Port table parser — listening-socket listings into ``PortRecord``s.

Two native formats are understood:

    lsof  (macOS ``lsof -nP -iTCP -sTCP:LISTEN``, process-first)
        COMMAND   PID   USER   FD   TYPE DEVICE SIZE/OFF NODE NAME
        node    12345   user   22u  IPv4  0x1234      0t0  TCP *:3000

    ss    (Linux ``ss -ltnp``, state-first)
        State  Recv-Q Send-Q Local Address:Port  Peer Address:Port Process
        LISTEN 0      128    0.0.0.0:22          0.0.0.0:*  users:(("sshd",pid=1234,fd=3))

Malformed lines are skipped, never fatal. A port listed twice (once per
IP family, typically) is kept only at its first occurrence.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator
from typing import Literal

from ocsec.core.models.snapshot import PortRecord

logger = logging.getLogger(__name__)

PortFormat = Literal["lsof", "ss"]

_PORT_SUFFIX = re.compile(r":(\d+)$")
_SS_PROCESS = re.compile(r'\("([^"]+)",pid=(\d+)')

_HEADERS: dict[str, tuple[str, ...]] = {
    "lsof": ("COMMAND",),
    "ss": ("State", "Netid"),
}

_MIN_FIELDS: dict[str, int] = {
    "lsof": 9,
    "ss": 5,
}


def _port_from(address: str) -> int | None:
    """Extract a valid TCP port from ``addr:port``, or None."""
    match = _PORT_SUFFIX.search(address)
    if not match:
        return None
    port = int(match.group(1))
    if not 1 <= port <= 65535:
        return None
    return port


def _parse_lsof_line(parts: list[str]) -> PortRecord | None:
    # some lsof builds append the socket state: "TCP *:3000 (LISTEN)"
    if parts[-1].startswith("(") and parts[-1].endswith(")"):
        parts = parts[:-1]
    port = _port_from(parts[-1])
    if port is None:
        return None
    pid = int(parts[1]) if parts[1].isdigit() else None
    return PortRecord(port=port, pid=pid, process=parts[0])


def _parse_ss_line(parts: list[str]) -> PortRecord | None:
    port = _port_from(parts[3])
    if port is None:
        return None
    match = _SS_PROCESS.search(" ".join(parts[5:]))
    if match:
        return PortRecord(port=port, pid=int(match.group(2)), process=match.group(1))
    return PortRecord(port=port, pid=None, process="unknown")


_LINE_PARSERS: dict[str, Callable[[list[str]], PortRecord | None]] = {
    "lsof": _parse_lsof_line,
    "ss": _parse_ss_line,
}


def _records(raw: str, fmt: str) -> Iterator[PortRecord]:
    headers = _HEADERS[fmt]
    min_fields = _MIN_FIELDS[fmt]
    parse_line = _LINE_PARSERS[fmt]

    for line in raw.split("\n"):
        if line.startswith(headers):
            continue
        parts = line.split()
        if len(parts) < min_fields:
            continue
        record = parse_line(parts)
        if record is None:
            logger.debug("Skipping unparseable %s line: %r", fmt, line)
            continue
        yield record


def parse_ports(raw: str, fmt: PortFormat) -> list[PortRecord]:
    """Parse a listening-port listing into unique port records.

    Args:
        raw: Multi-line command output.
        fmt: ``"lsof"`` or ``"ss"``.

    Returns:
        Records in listing order, first occurrence of each port only.
        Empty or header-only input gives an empty list.

    Raises:
        ValueError: If ``fmt`` is not a known format.
    """
    if fmt not in _LINE_PARSERS:
        raise ValueError(f"Unknown port listing format: {fmt!r}")

    seen: set[int] = set()
    results: list[PortRecord] = []
    for record in _records(raw or "", fmt):
        if record.port in seen:
            continue
        seen.add(record.port)
        results.append(record)
    return results


def parse_lsof_ports(raw: str) -> list[PortRecord]:
    return parse_ports(raw, "lsof")


def parse_ss_ports(raw: str) -> list[PortRecord]:
    return parse_ports(raw, "ss")
