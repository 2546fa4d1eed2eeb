"""
Apply use case — guarded remediation, one confirmed step at a time.

Nothing runs without an explicit yes for that step. The workflow stops
at the first failed step (later steps may assume earlier ones worked),
and every decision lands in the audit ledger so an operator can see
exactly what was changed and how to roll it back.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from ocsec.adapters.base import Invocation
from ocsec.core.context import AppContext
from ocsec.core.models.remediation import RemediationPlan, RemediationStep
from ocsec.core.persistence.audit import AuditEntry

logger = logging.getLogger(__name__)

# Remediation commands (disk encryption especially) outlast collection checks
APPLY_TIMEOUT_S = 300.0

ConfirmFn = Callable[[RemediationStep], bool]


def generate_operation_id() -> str:
    """Generate a unique, sortable operation ID."""
    ts = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    return f"apply-{ts}-{uuid.uuid4().hex[:8]}"


@dataclass
class StepOutcome:
    """What happened to one plan step."""

    step: RemediationStep
    status: str                     # ok, failed, declined, skipped
    output: str = ""
    error: str | None = None
    duration_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "n": self.step.n,
            "title": self.step.title,
            "command": self.step.command,
            "rollback": self.step.rollback,
            "status": self.status,
            "output": self.output,
            "error": self.error,
        }


@dataclass
class ApplyReport:
    """Result of walking a remediation plan."""

    operation_id: str = ""
    dry_run: bool = False
    outcomes: list[StepOutcome] = field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def applied(self) -> int:
        return self._count("ok")

    @property
    def failed(self) -> int:
        return self._count("failed")

    @property
    def declined(self) -> int:
        return self._count("declined")

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.applied > 0:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "operation_id": self.operation_id,
            "dry_run": self.dry_run,
            "status": self.status,
            "applied": self.applied,
            "failed": self.failed,
            "declined": self.declined,
            "steps": [o.to_dict() for o in self.outcomes],
        }


def _run_step(ctx: AppContext, step: RemediationStep) -> StepOutcome:
    try:
        invocation = Invocation.parse(step.command, timeout_s=APPLY_TIMEOUT_S)
    except ValueError as e:
        return StepOutcome(step=step, status="failed", error=f"Cannot parse command: {e}")

    start = time.monotonic()
    result = ctx.source.run(invocation)
    elapsed_ms = int((time.monotonic() - start) * 1000)

    if result.ok:
        return StepOutcome(step=step, status="ok", output=result.text, duration_ms=elapsed_ms)
    return StepOutcome(step=step, status="failed", error=result.error, duration_ms=elapsed_ms)


def apply_plan(
    ctx: AppContext,
    plan: RemediationPlan,
    confirm: ConfirmFn,
    dry_run: bool = False,
) -> ApplyReport:
    """Walk a plan, running each step only after ``confirm(step)`` says yes.

    Args:
        ctx: Application context (command source + audit ledger).
        plan: The plan to apply.
        confirm: Asked once per step; False declines that step only.
        dry_run: Ask and record, but run nothing.

    Returns:
        ApplyReport with one outcome per step.
    """
    report = ApplyReport(operation_id=generate_operation_id(), dry_run=dry_run)
    halted = False

    for step in plan.steps:
        if halted:
            outcome = StepOutcome(step=step, status="skipped", output="Not run: an earlier step failed")
        elif not confirm(step):
            outcome = StepOutcome(step=step, status="declined")
        elif dry_run:
            outcome = StepOutcome(step=step, status="skipped", output=f"[dry-run] Would run: {step.command}")
        else:
            logger.info("Applying step %d: %s", step.n, step.command)
            outcome = _run_step(ctx, step)
            if outcome.status == "failed":
                logger.warning("Step %d failed: %s", step.n, outcome.error)
                halted = True

        report.outcomes.append(outcome)
        ctx.audit.write(AuditEntry(
            operation_id=report.operation_id,
            operation_type="dry_run" if dry_run else "apply",
            step=step.n,
            title=step.title,
            command=step.command,
            rollback=step.rollback,
            status=outcome.status,
            output=outcome.output,
            error=outcome.error,
            duration_ms=outcome.duration_ms,
            context={"plan_collected_at": plan.collected_at},
        ))

    return report
