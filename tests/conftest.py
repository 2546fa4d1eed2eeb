"""
Shared test fixtures and configuration.
"""

from __future__ import annotations

import textwrap
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest

from ocsec.adapters.mock import MockCommandSource
from ocsec.core.context import AppContext, build_context
from ocsec.core.models.settings import Settings
from ocsec.core.models.snapshot import (
    CollectorResult,
    HostSignals,
    ListeningPorts,
    OsInfo,
    PortRecord,
    PostureSnapshot,
    SignalState,
    ToolStatus,
)

# ── Canned command output ───────────────────────────────────────────

SS_OUTPUT = textwrap.dedent("""\
    State  Recv-Q Send-Q Local Address:Port Peer Address:Port Process
    LISTEN 0      128    0.0.0.0:22         0.0.0.0:*         users:(("sshd",pid=1234,fd=3))
    LISTEN 0      511    127.0.0.1:5432     0.0.0.0:*         users:(("postgres",pid=910,fd=5))
    LISTEN 0      128    [::]:22            [::]:*            users:(("sshd",pid=1234,fd=4))
""")

LSOF_OUTPUT = textwrap.dedent("""\
    COMMAND   PID USER   FD   TYPE             DEVICE SIZE/OFF NODE NAME
    rapportd  512 me      4u  IPv4 0x1234567890abcdef      0t0  TCP *:49152 (LISTEN)
    node     4242 me     22u  IPv6 0xabcdef1234567890      0t0  TCP *:3000 (LISTEN)
    node     4242 me     23u  IPv4 0xabcdef1234567891      0t0  TCP 127.0.0.1:3000 (LISTEN)
""")

LSBLK_OUTPUT = textwrap.dedent("""\
    NAME          TYPE  MOUNTPOINT FSTYPE
    sda           disk
    ├─sda1        part  /boot      ext4
    └─sda2        part             crypto_LUKS
      └─cryptroot crypt /          ext4
""")

TMUTIL_OUTPUT = textwrap.dedent("""\
    Backup session status:
    {
        ClientID = "com.apple.backupd";
        Running = 1;
    }
""")

AUDIT_JSON = '{"ok": true, "findings": []}'

TOOL_RESPONSES = {
    "openclaw security audit --deep --json": AUDIT_JSON,
    "openclaw update status": "Up to date (1.4.2)",
    "openclaw status --deep": "Gateway: running",
}

LINUX_RESPONSES = {
    "ss -ltnp": SS_OUTPUT,
    "ufw status": "Status: active",
    "lsblk -o NAME,TYPE,MOUNTPOINT,FSTYPE": LSBLK_OUTPUT,
    "systemctl is-enabled unattended-upgrades": "enabled",
    **TOOL_RESPONSES,
}

DARWIN_RESPONSES = {
    "lsof -nP -iTCP -sTCP:LISTEN": LSOF_OUTPUT,
    "/usr/libexec/ApplicationFirewall/socketfilterfw --getglobalstate":
        "Firewall is enabled. (State = 1)",
    "fdesetup status": "FileVault is On.",
    "softwareupdate --schedule": "Automatic check is on",
    "tmutil status": TMUTIL_OUTPUT,
    **TOOL_RESPONSES,
}


# ── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def linux_source() -> MockCommandSource:
    """Mock source answering every Linux check with a healthy host."""
    return MockCommandSource(dict(LINUX_RESPONSES))


@pytest.fixture
def darwin_source() -> MockCommandSource:
    """Mock source answering every macOS check with a healthy host."""
    return MockCommandSource(dict(DARWIN_RESPONSES))


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with history under a temporary data dir."""
    return Settings(data_dir=tmp_path / "data", command_timeout_s=5)


@pytest.fixture
def app_ctx(settings: Settings, linux_source: MockCommandSource) -> AppContext:
    """Application context backed by the Linux mock source."""
    return build_context(settings, source=linux_source)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """An ocsec.yml pointing the data dir into tmp_path."""
    path = tmp_path / "ocsec.yml"
    path.write_text(textwrap.dedent(f"""\
        data_dir: {tmp_path / "data"}
        command_timeout_s: 5
    """))
    return path


def _signal(state: str) -> SignalState:
    return SignalState(state=state, raw_text=f"<{state}>")


@pytest.fixture
def make_snapshot() -> Callable[..., PostureSnapshot]:
    """Factory for snapshots with chosen signal states.

    Defaults describe a healthy Linux host with one listening port.
    """

    def factory(
        platform: str = "linux",
        firewall: str = "on",
        disk_encryption: str = "on",
        auto_updates: str = "on",
        backups: str = "on",
        ports: Iterable[int] = (22,),
        audit_ok: bool = True,
        update_ok: bool = True,
        collected_at: str = "2026-01-01T00:00:00+00:00",
    ) -> PostureSnapshot:
        audit = (
            CollectorResult.success({"ok": True, "findings": []})
            if audit_ok else CollectorResult.failure("audit crashed")
        )
        update = (
            CollectorResult.success("Up to date")
            if update_ok else CollectorResult.failure("network unreachable")
        )
        return PostureSnapshot(
            collected_at=collected_at,
            tool_status=ToolStatus(
                security_audit=audit,
                update_status=update,
                status_deep=CollectorResult.success("Gateway: running"),
            ),
            host=HostSignals(
                os=OsInfo(platform=platform, release="1.0", arch="x86_64"),
                listening=ListeningPorts(
                    tcp_ports=[PortRecord(port=p, pid=100 + p, process="proc") for p in ports],
                    raw_text="",
                ),
                firewall=_signal(firewall),
                disk_encryption=_signal(disk_encryption),
                auto_updates=_signal(auto_updates),
                backups=_signal(backups),
            ),
        )

    return factory


@pytest.fixture
def lsof_output() -> str:
    """macOS ``lsof`` listing: two processes, port 3000 on both families."""
    return LSOF_OUTPUT


@pytest.fixture
def ss_output() -> str:
    """Linux ``ss -ltnp`` listing: sshd on both families plus postgres."""
    return SS_OUTPUT


@pytest.fixture
def linux_os() -> OsInfo:
    return OsInfo(platform="linux", release="6.8.0", arch="x86_64")


@pytest.fixture
def darwin_os() -> OsInfo:
    return OsInfo(platform="darwin", release="23.4.0", arch="arm64")


@pytest.fixture
def linux_responses() -> dict[str, str]:
    """Command line → output for a healthy Linux host."""
    return dict(LINUX_RESPONSES)
