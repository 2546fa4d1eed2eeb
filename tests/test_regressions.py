"""
Tests for regression detection between two snapshots.
"""

import pytest

from ocsec.core.services.regressions import detect_regressions, highest_severity


class TestSignalRegressions:
    """Tests for on → not-on transitions."""

    def test_firewall_turned_off(self, make_snapshot):
        found = detect_regressions(make_snapshot(), make_snapshot(firewall="off"))
        assert len(found) == 1
        r = found[0]
        assert r.field == "host.firewall"
        assert r.was_value == "on"
        assert r.now_value == "off"
        assert r.severity == "high"

    def test_already_off_is_quiet(self, make_snapshot):
        assert detect_regressions(make_snapshot(firewall="off"), make_snapshot(firewall="off")) == []

    def test_on_to_unknown(self, make_snapshot):
        found = detect_regressions(make_snapshot(), make_snapshot(disk_encryption="unknown"))
        assert [(r.field, r.now_value, r.severity) for r in found] == [
            ("host.diskEncryption", "unknown", "high"),
        ]

    @pytest.mark.parametrize("signal", ["firewall", "disk_encryption", "auto_updates"])
    @pytest.mark.parametrize("was, now", [
        ("unknown", "off"),
        ("off", "unknown"),
        ("unknown", "unknown"),
    ])
    def test_moves_among_non_on_states_are_quiet(self, make_snapshot, signal, was, now):
        before = make_snapshot(**{signal: was})
        after = make_snapshot(**{signal: now})
        assert detect_regressions(before, after) == []

    def test_auto_updates_medium(self, make_snapshot):
        found = detect_regressions(make_snapshot(), make_snapshot(auto_updates="off"))
        assert found[0].severity == "medium"

    def test_backups_not_a_regression(self, make_snapshot):
        assert detect_regressions(make_snapshot(), make_snapshot(backups="off")) == []

    def test_recovery_not_reported(self, make_snapshot):
        before = make_snapshot(firewall="off", audit_ok=False, ports=(22, 80))
        after = make_snapshot(ports=(22,))
        assert detect_regressions(before, after) == []


class TestPortRegressions:
    """Tests for newly listening ports."""

    def test_new_port(self, make_snapshot):
        found = detect_regressions(make_snapshot(ports=(80,)), make_snapshot(ports=(80, 4444)))
        assert len(found) == 1
        r = found[0]
        assert r.field == "host.listening.tcpPorts"
        assert r.severity == "medium"
        assert r.new_ports == [4444]
        assert r.was_value == "1"
        assert r.now_value == "2"

    def test_swapped_port_still_new(self, make_snapshot):
        found = detect_regressions(make_snapshot(ports=(80,)), make_snapshot(ports=(8080,)))
        assert found[0].new_ports == [8080]

    def test_closed_port_quiet(self, make_snapshot):
        assert detect_regressions(make_snapshot(ports=(22, 80)), make_snapshot(ports=(22,))) == []


class TestAuditRegression:
    def test_audit_started_failing(self, make_snapshot):
        found = detect_regressions(make_snapshot(), make_snapshot(audit_ok=False))
        assert [(r.field, r.was_value, r.now_value, r.severity) for r in found] == [
            ("toolStatus.securityAudit", "ok", "error", "high"),
        ]


class TestOrderingAndInputs:
    """Rule order, mapping inputs, partial history."""

    def test_declaration_order(self, make_snapshot):
        before = make_snapshot(ports=(22,))
        after = make_snapshot(
            firewall="off", disk_encryption="off", auto_updates="off",
            ports=(22, 9000), audit_ok=False,
        )
        fields = [r.field for r in detect_regressions(before, after)]
        assert fields == [
            "host.firewall",
            "host.diskEncryption",
            "host.autoUpdates",
            "host.listening.tcpPorts",
            "toolStatus.securityAudit",
        ]

    def test_accepts_stored_mappings(self, make_snapshot):
        before = make_snapshot().to_dict()
        after = make_snapshot(firewall="off").to_dict()
        assert [r.field for r in detect_regressions(before, after)] == ["host.firewall"]

    def test_missing_field_reads_as_missing(self, make_snapshot):
        before = make_snapshot().to_dict()
        after = {"collectedAt": "2026-01-02T00:00:00+00:00", "host": {}}
        found = {r.field: r for r in detect_regressions(before, after)}
        assert found["host.firewall"].now_value == "missing"
        assert found["toolStatus.securityAudit"].now_value == "error"

    def test_empty_mappings(self):
        assert detect_regressions({}, {}) == []


class TestHighestSeverity:
    def test_none_for_empty(self):
        assert highest_severity([]) is None

    def test_picks_most_severe(self, make_snapshot):
        found = detect_regressions(
            make_snapshot(ports=(22,)),
            make_snapshot(auto_updates="off", firewall="off", ports=(22, 23)),
        )
        assert highest_severity(found) == "high"
