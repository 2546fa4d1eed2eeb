"""
Tests for risk scoring — deduction table, additivity, clamping, labels.
"""

import pytest

from ocsec.core.models.analysis import RiskScore
from ocsec.core.services.scoring import score, severity_for_points


class TestScore:
    """Tests for score()."""

    def test_healthy_host_scores_100(self, make_snapshot):
        risk = score(make_snapshot())
        assert risk.score == 100
        assert risk.deductions == []
        assert risk.label == "Good"

    def test_firewall_and_updates_off(self, make_snapshot):
        risk = score(make_snapshot(firewall="off", auto_updates="off"))
        assert risk.score == 55
        assert [d.reason for d in risk.deductions] == [
            "Host firewall is off",
            "Auto-updates are off",
        ]
        assert risk.label == "Poor"

    @pytest.mark.parametrize("overrides, points", [
        ({"firewall": "off"}, -30),
        ({"firewall": "unknown"}, -15),
        ({"disk_encryption": "off"}, -25),
        ({"disk_encryption": "unknown"}, -10),
        ({"auto_updates": "off"}, -15),
        ({"auto_updates": "unknown"}, -5),
        ({"ports": range(1000, 1006)}, -10),
        ({"audit_ok": False}, -20),
        ({"update_ok": False}, -5),
    ])
    def test_single_deduction(self, make_snapshot, overrides, points):
        risk = score(make_snapshot(**overrides))
        assert [d.points for d in risk.deductions] == [points]
        assert risk.score == 100 + points

    def test_backups_not_scored(self, make_snapshot):
        assert score(make_snapshot(backups="off")).score == 100

    def test_port_threshold(self, make_snapshot):
        assert score(make_snapshot(ports=range(1000, 1005))).score == 100
        risk = score(make_snapshot(ports=range(1000, 1006)))
        assert risk.deductions[0].reason == "6 listening ports (>5)"

    def test_additive(self, make_snapshot):
        risk = score(make_snapshot(disk_encryption="unknown", update_ok=False))
        assert risk.score == 100 - 10 - 5

    def test_clamped_at_zero(self, make_snapshot):
        snapshot = make_snapshot(
            firewall="off",
            disk_encryption="off",
            auto_updates="off",
            ports=range(2000, 2010),
            audit_ok=False,
            update_ok=False,
        )
        risk = score(snapshot)
        assert risk.score == 0
        assert risk.label == "Critical"
        assert len(risk.deductions) == 6

    def test_sorted_most_severe_first(self, make_snapshot):
        risk = score(make_snapshot(auto_updates="unknown", firewall="off", audit_ok=False))
        assert [d.points for d in risk.deductions] == [-30, -20, -5]

    def test_deduction_severity(self, make_snapshot):
        risk = score(make_snapshot(firewall="off", disk_encryption="unknown", update_ok=False))
        assert [d.severity for d in risk.deductions] == ["high", "medium", "low"]


class TestSeverity:
    """Tests for point → severity bucketing."""

    @pytest.mark.parametrize("points, expected", [
        (-30, "high"),
        (-25, "high"),
        (-24, "medium"),
        (-10, "medium"),
        (-9, "low"),
        (-5, "low"),
    ])
    def test_buckets(self, points, expected):
        assert severity_for_points(points) == expected


class TestLabel:
    """Tests for score labels."""

    @pytest.mark.parametrize("value, label", [
        (100, "Good"), (80, "Good"), (79, "Fair"), (60, "Fair"),
        (59, "Poor"), (40, "Poor"), (39, "Critical"), (0, "Critical"),
    ])
    def test_label(self, value, label):
        assert RiskScore(score=value).label == label

    def test_label_serialized(self):
        assert RiskScore(score=70).to_dict()["label"] == "Fair"
