"""
Tests for cron scheduling.
"""

import pytest

from ocsec.core.services.schedule import cron_expression, cron_line


class TestCronExpression:
    @pytest.mark.parametrize("minutes, expected", [
        (1, "* * * * *"),
        (5, "*/5 * * * *"),
        (15, "*/15 * * * *"),
        (60, "0 * * * *"),
        (120, "0 */2 * * *"),
        (360, "0 */6 * * *"),
        (1440, "0 0 * * *"),
    ])
    def test_valid(self, minutes, expected):
        assert cron_expression(minutes) == expected

    @pytest.mark.parametrize("minutes", [0, -5, 7, 45, 90, 300, 2880])
    def test_invalid(self, minutes):
        with pytest.raises(ValueError):
            cron_expression(minutes)


class TestCronLine:
    def test_discards_output_by_default(self):
        line = cron_line(15, "/usr/local/bin/ocsec")
        assert line == "*/15 * * * * /usr/local/bin/ocsec --quiet collect >/dev/null 2>&1"

    def test_log_file(self):
        line = cron_line(60, "ocsec", "/var/log/ocsec collect.log")
        assert line == "0 * * * * ocsec --quiet collect >> '/var/log/ocsec collect.log' 2>&1"
