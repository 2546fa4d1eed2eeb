"""
Collect use case — take a snapshot, score it, and store it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ocsec.core.context import AppContext
from ocsec.core.models.analysis import RiskScore
from ocsec.core.models.snapshot import PostureSnapshot
from ocsec.core.persistence.runs import RunRecord
from ocsec.core.services.collector import collect_all
from ocsec.core.services.scoring import score

logger = logging.getLogger(__name__)


@dataclass
class CollectResult:
    """Result of one collection cycle."""

    snapshot: PostureSnapshot | None = None
    run: RunRecord | None = None
    risk: RiskScore | None = None
    error: str | None = None

    @property
    def run_id(self) -> str | None:
        return self.run.id if self.run else None

    def to_dict(self) -> dict:
        result: dict = {}
        if self.error:
            result["error"] = self.error
        if self.run:
            result["id"] = self.run.id
        if self.snapshot:
            result["collectedAt"] = self.snapshot.collected_at
            result["snapshot"] = self.snapshot.to_dict()
        if self.risk:
            result["risk"] = self.risk.to_dict()
        return result


def run_collect(ctx: AppContext, store: bool = True) -> CollectResult:
    """Collect a snapshot and (optionally) append it to the run store.

    Collection itself never fails; only storing can, in which case the
    snapshot is still returned alongside the error.
    """
    snapshot = collect_all(ctx.source, ctx.settings)
    result = CollectResult(snapshot=snapshot, risk=score(snapshot))

    if store:
        try:
            result.run = ctx.runs.insert(snapshot)
            logger.info("Stored run %s", result.run.id)
        except OSError as e:
            logger.error("Failed to store snapshot: %s", e)
            result.error = f"Snapshot collected but not stored: {e}"

    return result
