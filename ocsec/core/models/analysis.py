"""
Analysis models — transient values produced by scoring and comparison.

None of these are persisted with a snapshot; they are recomputed from
snapshots every time they are shown.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, computed_field

from ocsec.core.models.snapshot import SnapshotModel

Severity = Literal["high", "medium", "low"]
DiffKind = Literal["added", "removed", "changed"]

SEVERITY_ORDER: dict[str, int] = {"high": 0, "medium": 1, "low": 2}


def severity_for_points(points: int) -> Severity:
    """Bucket a deduction's magnitude into a display severity.

    This is the only place the thresholds live; every view that shows
    a severity for a deduction goes through here.
    """
    if points <= -25:
        return "high"
    if points <= -10:
        return "medium"
    return "low"


class Deduction(SnapshotModel):
    """A named, signed adjustment to the base score of 100."""

    reason: str
    points: int = Field(lt=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def severity(self) -> Severity:
        return severity_for_points(self.points)


class RiskScore(SnapshotModel):
    """Score 0–100 (100 = perfect) with its itemized deductions."""

    score: int = Field(ge=0, le=100)
    deductions: list[Deduction] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def label(self) -> str:
        if self.score >= 80:
            return "Good"
        if self.score >= 60:
            return "Fair"
        if self.score >= 40:
            return "Poor"
        return "Critical"


class DiffEntry(SnapshotModel):
    """One field-level difference between two data trees."""

    path: str
    kind: DiffKind
    old_value: Any = None
    new_value: Any = None


class Regression(SnapshotModel):
    """A transition away from a good state between two snapshots."""

    field: str
    was_value: str
    now_value: str
    severity: Severity
    new_ports: list[int] = Field(default_factory=list)
