"""
Mock command source — universal test double for signal collection.

Used in mock mode (tests, ``ocsec web --mock``) to simulate command
output without touching the host. Responses are keyed by the
invocation's display string, e.g. ``"ufw status"``.
"""

from __future__ import annotations

import threading

from ocsec.adapters.base import CommandSource, Invocation
from ocsec.core.models.snapshot import CollectorResult


class MockCommandSource(CommandSource):
    """Canned-output command source.

    Unknown commands fail with "not mocked", so an unconfigured mock
    behaves like a host where none of the tools are installed.
    """

    def __init__(
        self,
        responses: dict[str, CollectorResult | str] | None = None,
        source_name: str = "mock",
    ):
        self._name = source_name
        self._responses: dict[str, CollectorResult] = {}
        self._call_log: list[Invocation] = []
        self._lock = threading.Lock()
        for command, response in (responses or {}).items():
            self.set_response(command, response)

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[Invocation]:
        """All invocations this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def commands(self) -> list[str]:
        """Display strings of every invocation received, in call order."""
        return [inv.display for inv in self._call_log]

    def is_available(self, cmd: str) -> bool:
        return any(key.split(" ", 1)[0] == cmd for key in self._responses)

    def set_response(self, command: str, response: CollectorResult | str) -> None:
        """Set the response for a command line; plain text means success."""
        if isinstance(response, str):
            response = CollectorResult.success(response)
        self._responses[command] = response

    def set_failure(self, command: str, error: str = "Mock failure") -> None:
        """Configure a command to fail."""
        self._responses[command] = CollectorResult.failure(error)

    def run(self, invocation: Invocation) -> CollectorResult:
        # collectors call run() from worker threads
        with self._lock:
            self._call_log.append(invocation)
        response = self._responses.get(invocation.display)
        if response is None:
            return CollectorResult.failure(
                f"[mock] not mocked: {invocation.display}",
                mock=True,
            )
        return response

    def reset(self) -> None:
        """Clear call log and responses."""
        self._call_log.clear()
        self._responses.clear()
