"""
Compare use case — structural diff plus regressions for two snapshots.

Snapshots come either from the run store (by id, defaulting to the two
most recent runs) or from JSON files on disk. Both paths compare the
stored mappings as-is, so older or partial history still compares.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ocsec.core.context import AppContext
from ocsec.core.models.analysis import DiffEntry, Regression, Severity
from ocsec.core.services.diff import diff, summarize
from ocsec.core.services.regressions import detect_regressions, highest_severity

logger = logging.getLogger(__name__)


class SnapshotFileError(Exception):
    """Raised when a snapshot file can't be read or isn't a JSON object."""


@dataclass
class CompareResult:
    """Diff and regressions between a previous and a latest snapshot."""

    previous_id: str = ""
    latest_id: str = ""
    previous_at: str = ""
    latest_at: str = ""
    changes: list[DiffEntry] = field(default_factory=list)
    regressions: list[Regression] = field(default_factory=list)
    error: str | None = None

    @property
    def highest_severity(self) -> Severity | None:
        return highest_severity(self.regressions)

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return {
            "previous": {"id": self.previous_id, "collectedAt": self.previous_at},
            "latest": {"id": self.latest_id, "collectedAt": self.latest_at},
            "summary": summarize(self.changes),
            "changes": [c.to_dict() for c in self.changes],
            "regressions": [r.to_dict() for r in self.regressions],
        }


def compare_snapshots(
    previous: Mapping[str, Any],
    latest: Mapping[str, Any],
    previous_id: str = "",
    latest_id: str = "",
) -> CompareResult:
    """Compare two snapshot mappings (older first)."""
    return CompareResult(
        previous_id=previous_id,
        latest_id=latest_id,
        previous_at=str(previous.get("collectedAt", "")),
        latest_at=str(latest.get("collectedAt", "")),
        changes=diff(previous, latest),
        regressions=detect_regressions(previous, latest),
    )


def compare_runs(
    ctx: AppContext,
    previous_id: str | None = None,
    latest_id: str | None = None,
) -> CompareResult:
    """Compare two stored runs.

    With no ids, compares the two most recent runs. With only
    ``previous_id``, compares that run against the most recent one;
    naming the most recent run itself is an error result.

    Raises:
        RunNotFoundError: If an explicit id is not stored.
    """
    if previous_id is None and latest_id is None:
        pair = ctx.runs.latest_pair()
        if pair is None:
            return CompareResult(error="Need at least two stored runs to compare")
        previous, latest = pair
    elif previous_id is not None and latest_id is None:
        previous = ctx.runs.get(previous_id)
        latest = ctx.runs.list_runs(limit=1)[0]
        if latest.id == previous.id:
            return CompareResult(error=f"Run {previous.id} is already the most recent run")
    elif previous_id is None:
        return CompareResult(error="A latest run needs a previous run to compare against")
    else:
        previous = ctx.runs.get(previous_id)
        latest = ctx.runs.get(latest_id)

    logger.debug("Comparing runs %s → %s", previous.id, latest.id)
    return compare_snapshots(previous.snapshot, latest.snapshot, previous.id, latest.id)


def load_snapshot_file(path: Path) -> dict[str, Any]:
    """Read a snapshot JSON file.

    Accepts a bare snapshot or a stored run (``{"id", "snapshot"}``).
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise SnapshotFileError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SnapshotFileError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotFileError(f"Expected a JSON object in {path}, got {type(data).__name__}")
    if isinstance(data.get("snapshot"), dict):
        return data["snapshot"]
    return data


def compare_files(previous_path: Path, latest_path: Path) -> CompareResult:
    """Compare two snapshot files (older first).

    Raises:
        SnapshotFileError: If either file is unreadable.
    """
    previous = load_snapshot_file(previous_path)
    latest = load_snapshot_file(latest_path)
    return compare_snapshots(previous, latest, previous_path.name, latest_path.name)
