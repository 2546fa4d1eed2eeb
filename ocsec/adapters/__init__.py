"""Adapters — raw signal sources for external commands.

Public re-exports for convenient access.
"""

from ocsec.adapters.base import CommandSource, Invocation
from ocsec.adapters.mock import MockCommandSource
from ocsec.adapters.shell.command import ShellCommandSource

__all__ = [
    "CommandSource",
    "Invocation",
    "MockCommandSource",
    "ShellCommandSource",
]
