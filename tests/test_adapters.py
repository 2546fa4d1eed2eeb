"""
Tests for command sources — invocations, mock source, shell source.
"""

import sys

import pytest

from ocsec.adapters import Invocation, MockCommandSource, ShellCommandSource
from ocsec.core.models.snapshot import CollectorResult


def py(code: str, timeout_s: float = 10.0) -> Invocation:
    return Invocation(cmd=sys.executable, args=["-c", code], timeout_s=timeout_s)


class TestInvocation:
    """Tests for the Invocation model."""

    def test_argv_and_display(self):
        inv = Invocation(cmd="lsblk", args=["-o", "NAME,TYPE"])
        assert inv.argv == ["lsblk", "-o", "NAME,TYPE"]
        assert inv.display == "lsblk -o NAME,TYPE"

    def test_display_quotes(self):
        inv = Invocation(cmd="echo", args=["two words"])
        assert inv.display == "echo 'two words'"

    def test_parse(self):
        inv = Invocation.parse("sudo systemctl enable --now unattended-upgrades", timeout_s=9)
        assert inv.cmd == "sudo"
        assert inv.args[-1] == "unattended-upgrades"
        assert inv.timeout_s == 9

    def test_parse_empty(self):
        with pytest.raises(ValueError):
            Invocation.parse("   ")


class TestMockSource:
    """Tests for the MockCommandSource test double."""

    def test_text_response_is_success(self):
        source = MockCommandSource({"ufw status": "Status: active"})
        result = source.run(Invocation.parse("ufw status"))
        assert result.ok
        assert result.value == "Status: active"

    def test_unmocked_command_fails(self):
        source = MockCommandSource()
        result = source.run(Invocation.parse("ufw status"))
        assert not result.ok
        assert result.error == "[mock] not mocked: ufw status"

    def test_set_failure(self):
        source = MockCommandSource()
        source.set_failure("ufw status", "permission denied")
        assert source.run(Invocation.parse("ufw status")).error == "permission denied"

    def test_explicit_result(self):
        source = MockCommandSource()
        source.set_response("x", CollectorResult.success({"a": 1}))
        assert source.run(Invocation.parse("x")).value == {"a": 1}

    def test_call_log(self):
        source = MockCommandSource({"a": "1"})
        source.run(Invocation.parse("a"))
        source.run(Invocation.parse("b --flag"))
        assert source.call_count == 2
        assert source.commands == ["a", "b --flag"]

    def test_is_available(self):
        source = MockCommandSource({"ufw status": "x"})
        assert source.is_available("ufw")
        assert not source.is_available("ss")

    def test_reset(self):
        source = MockCommandSource({"a": "1"})
        source.run(Invocation.parse("a"))
        source.reset()
        assert source.call_count == 0
        assert not source.run(Invocation.parse("a")).ok

    def test_repr(self):
        assert repr(MockCommandSource()) == "<MockCommandSource name='mock'>"


class TestShellSource:
    """Tests for ShellCommandSource against real processes."""

    def test_success(self):
        result = ShellCommandSource().run(py("print('hello')"))
        assert result.ok
        assert result.value == "hello"
        assert result.meta["return_code"] == 0
        assert "duration_ms" in result.meta

    def test_undecodable_byte_is_replaced(self):
        code = r"import sys; sys.stdout.buffer.write(b'caf\xe9 12 u 1 IPv4 0 0t0 TCP *:3000\n')"
        result = ShellCommandSource().run(py(code))
        assert result.ok
        assert result.value == "caf\ufffd 12 u 1 IPv4 0 0t0 TCP *:3000"

    def test_stdout_and_stderr_merged(self):
        code = "import sys; print('out'); print('err', file=sys.stderr)"
        result = ShellCommandSource().run(py(code))
        assert result.value == "out\nerr"

    def test_nonzero_exit_uses_stderr(self):
        code = "import sys; print('bad thing', file=sys.stderr); sys.exit(3)"
        result = ShellCommandSource().run(py(code))
        assert not result.ok
        assert result.error == "bad thing"
        assert result.meta["return_code"] == 3

    def test_nonzero_exit_without_output(self):
        result = ShellCommandSource().run(py("import sys; sys.exit(2)"))
        assert result.error == "Command exited with code 2"

    def test_timeout(self):
        result = ShellCommandSource().run(py("import time; time.sleep(5)", timeout_s=0.3))
        assert not result.ok
        assert result.error == "Command timed out after 0.3s"

    def test_missing_binary(self):
        result = ShellCommandSource().run(Invocation(cmd="ocsec-definitely-not-a-binary"))
        assert not result.ok
        assert result.error == "Command not found: ocsec-definitely-not-a-binary"

    def test_is_available(self):
        source = ShellCommandSource()
        assert source.is_available(sys.executable)
        assert not source.is_available("ocsec-definitely-not-a-binary")

    def test_name(self):
        assert ShellCommandSource().name == "shell"
