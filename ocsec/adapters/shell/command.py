"""
Shell command source — run OS and tool commands and capture their output.

Commands are executed directly (no shell), each bounded by its own
timeout. A timeout, a missing binary or a non-zero exit are ordinary
failures, never exceptions.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from ocsec.adapters.base import CommandSource, Invocation
from ocsec.core.models.snapshot import CollectorResult

logger = logging.getLogger(__name__)


class ShellCommandSource(CommandSource):
    """Execute commands with ``subprocess.run`` and capture output.

    On success the value is stdout and stderr merged (in that order,
    blank parts dropped), matching what the operator would see in a
    terminal.
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self, cmd: str) -> bool:
        return shutil.which(cmd) is not None

    def run(self, invocation: Invocation) -> CollectorResult:
        command = invocation.display
        logger.debug("Executing: %s (timeout=%ss)", command, invocation.timeout_s)
        start = time.monotonic()

        try:
            result = subprocess.run(
                invocation.argv,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=invocation.timeout_s,
            )
        except subprocess.TimeoutExpired:
            logger.info("Command timed out: %s", command)
            return CollectorResult.failure(
                f"Command timed out after {invocation.timeout_s:g}s",
                command=command,
                timeout=invocation.timeout_s,
            )
        except FileNotFoundError:
            return CollectorResult.failure(
                f"Command not found: {invocation.cmd}",
                command=command,
            )
        except Exception as e:
            return CollectorResult.failure(
                f"Command execution error: {e}",
                command=command,
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = (result.stdout or "").strip()
        stderr = (result.stderr or "").strip()

        if result.returncode == 0:
            merged = "\n".join(part for part in (output, stderr) if part)
            return CollectorResult.success(
                merged,
                command=command,
                return_code=result.returncode,
                duration_ms=elapsed_ms,
            )

        logger.debug("Command failed (rc=%d): %s", result.returncode, command)
        return CollectorResult.failure(
            stderr or output or f"Command exited with code {result.returncode}",
            command=command,
            return_code=result.returncode,
            duration_ms=elapsed_ms,
        )
