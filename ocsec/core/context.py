"""
Application context — everything the use cases need, passed explicitly.

Entry points build one context at startup and hand it down:

    - CLI:          main.py   → build_context(settings, mock=...)
    - Web server:   server.py → create_app(ctx)
    - Tests:        conftest  → AppContext with a MockCommandSource

There is no module-level state: the pure core (parsing, scoring, diffing,
regressions) never sees a context at all, and two contexts can coexist
in one process.
"""

from __future__ import annotations

from dataclasses import dataclass

from ocsec.adapters.base import CommandSource
from ocsec.adapters.mock import MockCommandSource
from ocsec.adapters.shell.command import ShellCommandSource
from ocsec.core.models.settings import Settings
from ocsec.core.persistence.audit import AuditWriter
from ocsec.core.persistence.runs import RunStore


@dataclass
class AppContext:
    """Settings plus the I/O handles built from them."""

    settings: Settings
    source: CommandSource
    runs: RunStore
    audit: AuditWriter

    @property
    def mock_mode(self) -> bool:
        return isinstance(self.source, MockCommandSource)


def build_context(
    settings: Settings,
    source: CommandSource | None = None,
    mock: bool = False,
) -> AppContext:
    """Build a context from settings.

    Args:
        settings: Loaded settings.
        source: Explicit command source (wins over ``mock``).
        mock: Use an empty MockCommandSource instead of the shell.
    """
    if source is None:
        source = MockCommandSource() if mock else ShellCommandSource()
    return AppContext(
        settings=settings,
        source=source,
        runs=RunStore(settings.runs_path),
        audit=AuditWriter(settings.audit_path),
    )
