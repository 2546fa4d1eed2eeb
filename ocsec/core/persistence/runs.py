"""
Run store — append-only history of posture snapshots.

Every collection writes one NDJSON line ``{id, collectedAt, snapshot}``.
Runs are looked up by id and ordered by their snapshot's collectedAt.
Entries are never modified or deleted; a corrupt line is skipped on read.
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ocsec.core.models.snapshot import PostureSnapshot

logger = logging.getLogger(__name__)

DEFAULT_RUNS_FILE = "runs.ndjson"


class RunNotFoundError(LookupError):
    """Raised when a run id is not in the store."""

    def __init__(self, run_id: str):
        super().__init__(f"Run not found: {run_id}")
        self.run_id = run_id


class RunRecord(BaseModel):
    """One stored run. ``snapshot`` is kept as the raw stored mapping."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    collected_at: str
    snapshot: dict[str, Any] = Field(default_factory=dict)

    def summary(self) -> dict[str, str]:
        return {"id": self.id, "collectedAt": self.collected_at}

    def load_snapshot(self) -> PostureSnapshot:
        """Validate the stored mapping into a snapshot model."""
        return PostureSnapshot.from_dict(self.snapshot)


class RunStore:
    """Append-only NDJSON snapshot log.

    Each call to insert() appends a single JSON line. The file and its
    directory are created on first write.
    """

    def __init__(self, path: Path):
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def insert(self, snapshot: PostureSnapshot, run_id: str | None = None) -> RunRecord:
        """Append a snapshot and return its record.

        Args:
            snapshot: The snapshot to store.
            run_id: Caller-supplied identifier (default: a new UUID4).
        """
        record = RunRecord(
            id=run_id or str(uuid.uuid4()),
            collected_at=snapshot.collected_at,
            snapshot=snapshot.to_dict(),
        )
        line = json.dumps(record.model_dump(mode="json", by_alias=True), ensure_ascii=False)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._lock, self._path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
        logger.debug("Run stored: %s (%s)", record.id, record.collected_at)
        return record

    def _read_all(self) -> list[RunRecord]:
        if not self._path.is_file():
            return []

        records = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        records.append(RunRecord.model_validate(json.loads(line)))
                    except ValueError as e:
                        logger.warning("Skipping corrupt run entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read run store: %s", e)

        return records

    def list_runs(self, limit: int = 50) -> list[RunRecord]:
        """Most recent runs first (by collectedAt)."""
        records = sorted(self._read_all(), key=lambda r: r.collected_at, reverse=True)
        return records[: max(0, limit)]

    def get(self, run_id: str) -> RunRecord:
        """Look up a run by id.

        Raises:
            RunNotFoundError: If no run has that id.
        """
        for record in self._read_all():
            if record.id == run_id:
                return record
        raise RunNotFoundError(run_id)

    def latest_pair(self) -> tuple[RunRecord, RunRecord] | None:
        """The two most recent runs as ``(previous, latest)``, if there are two."""
        recent = self.list_runs(limit=2)
        if len(recent) < 2:
            return None
        return recent[1], recent[0]

    def count(self) -> int:
        return len(self._read_all())
