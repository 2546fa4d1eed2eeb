"""
Remediation models — the plan contract between planner and apply workflow.

A plan is advisory: producing one changes nothing on the host. Each step
carries the exact command to run and the command that undoes it.
"""

from __future__ import annotations

from pydantic import Field

from ocsec.core.models.snapshot import SnapshotModel

PLAN_NOTES = "This is plan-only. Nothing has been changed."


class RemediationStep(SnapshotModel):
    """One numbered remediation step."""

    n: int = Field(ge=1)
    title: str
    signal: str = ""               # snapshot signal this step addresses ("" = tool-wide)
    command: str
    rollback: str
    notes: str | None = None


class RemediationPlan(SnapshotModel):
    """Ordered remediation steps derived from one snapshot."""

    collected_at: str
    notes: str = PLAN_NOTES
    steps: list[RemediationStep] = Field(default_factory=list)

    @property
    def total_steps(self) -> int:
        return len(self.steps)
