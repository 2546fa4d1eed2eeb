"""
Posture snapshot — the canonical, typed record of one collection cycle.

A snapshot is created once, by the signal normalizer, and never mutated
afterwards. Its JSON form (camelCase keys, see ``to_dict``) is the
interchange format between collection, the run store and every
two-snapshot comparison, so field names here are a compatibility contract.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

State = Literal["on", "off", "unknown"]


def now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class SnapshotModel(BaseModel):
    """Base for snapshot values: immutable, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping using the wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True)


class CollectorResult(SnapshotModel):
    """Outcome of one external invocation.

    The universal "fallible external fact": a successful result always
    carries a value, a failed one always carries an error. Collectors
    NEVER raise — failures are captured here.
    """

    ok: bool
    value: Any = None
    error: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_outcome(self) -> CollectorResult:
        if self.ok and self.value is None:
            raise ValueError("a successful result must carry a value")
        if not self.ok and not self.error:
            raise ValueError("a failed result must carry an error")
        return self

    @classmethod
    def success(cls, value: Any, **meta: Any) -> CollectorResult:
        """Create a success result."""
        return cls(ok=True, value=value, meta=meta)

    @classmethod
    def failure(cls, error: str, **meta: Any) -> CollectorResult:
        """Create a failure result."""
        return cls(ok=False, error=error or "unknown error", meta=meta)

    @property
    def text(self) -> str:
        """Human-readable payload: the value on success, the error otherwise."""
        if self.ok:
            return self.value if isinstance(self.value, str) else str(self.value)
        return self.error or ""


def _not_collected() -> CollectorResult:
    return CollectorResult.failure("not collected")


class SignalState(SnapshotModel):
    """Tri-state classification of one security signal.

    ``state`` is derived solely from ``raw_text``; ``unknown`` is the
    default whenever the command failed or matched nothing.
    """

    state: State = "unknown"
    raw_text: str = ""


class PortRecord(SnapshotModel):
    """One listening TCP port."""

    port: int = Field(ge=1, le=65535)
    pid: int | None = None
    process: str = "unknown"


class ListeningPorts(SnapshotModel):
    """Listening TCP ports plus the raw command output they came from."""

    tcp_ports: list[PortRecord] = Field(default_factory=list)
    raw_text: str = ""

    @field_validator("tcp_ports")
    @classmethod
    def _unique_ports(cls, ports: list[PortRecord]) -> list[PortRecord]:
        seen: set[int] = set()
        for record in ports:
            if record.port in seen:
                raise ValueError(f"duplicate listening port: {record.port}")
            seen.add(record.port)
        return ports


class OsInfo(SnapshotModel):
    platform: str
    release: str = ""
    arch: str = ""


class HostSignals(SnapshotModel):
    """Everything collected from the host operating system."""

    os: OsInfo
    listening: ListeningPorts = Field(default_factory=ListeningPorts)
    firewall: SignalState = Field(default_factory=SignalState)
    disk_encryption: SignalState = Field(default_factory=SignalState)
    auto_updates: SignalState = Field(default_factory=SignalState)
    backups: SignalState = Field(default_factory=SignalState)


class ToolStatus(SnapshotModel):
    """Results of the third-party agent CLI checks."""

    security_audit: CollectorResult = Field(default_factory=_not_collected)
    update_status: CollectorResult = Field(default_factory=_not_collected)
    status_deep: CollectorResult = Field(default_factory=_not_collected)


class PostureSnapshot(SnapshotModel):
    """Root snapshot model — one point-in-time capture for a host."""

    collected_at: str = Field(default_factory=now_iso)
    tool_status: ToolStatus = Field(default_factory=ToolStatus)
    host: HostSignals

    @property
    def platform(self) -> str:
        return self.host.os.platform

    @property
    def port_numbers(self) -> list[int]:
        """Listening port numbers in collection order."""
        return [p.port for p in self.host.listening.tcp_ports]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PostureSnapshot:
        """Validate a stored (camelCase) snapshot mapping."""
        return cls.model_validate(data)
