"""
Domain models — Pydantic types for the posture center.

All models are re-exported here for convenient access:

    from ocsec.core.models import PostureSnapshot, SignalState, RiskScore, Regression
"""

from ocsec.core.models.analysis import (
    Deduction,
    DiffEntry,
    Regression,
    RiskScore,
    severity_for_points,
)
from ocsec.core.models.remediation import RemediationPlan, RemediationStep
from ocsec.core.models.settings import ServerSettings, Settings
from ocsec.core.models.snapshot import (
    CollectorResult,
    HostSignals,
    ListeningPorts,
    OsInfo,
    PortRecord,
    PostureSnapshot,
    SignalState,
    ToolStatus,
)

__all__ = [
    # snapshot.py
    "CollectorResult",
    "HostSignals",
    "ListeningPorts",
    "OsInfo",
    "PortRecord",
    "PostureSnapshot",
    "SignalState",
    "ToolStatus",
    # analysis.py
    "Deduction",
    "DiffEntry",
    "Regression",
    "RiskScore",
    "severity_for_points",
    # remediation.py
    "RemediationPlan",
    "RemediationStep",
    # settings.py
    "ServerSettings",
    "Settings",
]
