"""
Command source base — the protocol contract between collectors and the OS.

Collectors never invoke processes directly; they describe what they want
as an ``Invocation`` and hand it to a ``CommandSource``. The source turns
it into a ``CollectorResult`` and never raises.
"""

from __future__ import annotations

import shlex
from abc import ABC, abstractmethod

from pydantic import BaseModel, Field

from ocsec.core.models.snapshot import CollectorResult

DEFAULT_TIMEOUT_S = 30.0


class Invocation(BaseModel):
    """One external command to run."""

    cmd: str
    args: list[str] = Field(default_factory=list)
    timeout_s: float = DEFAULT_TIMEOUT_S

    @property
    def argv(self) -> list[str]:
        return [self.cmd, *self.args]

    @property
    def display(self) -> str:
        """Shell-quoted command line, also used as the mock lookup key."""
        return shlex.join(self.argv)

    @classmethod
    def parse(cls, command_line: str, timeout_s: float = DEFAULT_TIMEOUT_S) -> Invocation:
        """Build an invocation from a plain command line (no shell features)."""
        argv = shlex.split(command_line)
        if not argv:
            raise ValueError("empty command line")
        return cls(cmd=argv[0], args=argv[1:], timeout_s=timeout_s)


class CommandSource(ABC):
    """Abstract base class for raw signal sources.

    Sources run commands and return results.
    They NEVER raise exceptions — failures are captured in the result.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The source identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def is_available(self, cmd: str) -> bool:
        """Check whether ``cmd`` can be run by this source.

        Should be fast and never raise.
        """

    @abstractmethod
    def run(self, invocation: Invocation) -> CollectorResult:
        """Run the invocation and return its result.

        MUST never raise exceptions. All failures (missing binary,
        non-zero exit, timeout) are captured with ok=False.
        """

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
