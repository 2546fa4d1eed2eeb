"""
Tests for configuration loading — ocsec.yml, env overrides, errors.
"""

import textwrap
from pathlib import Path

import pytest

from ocsec.core.config.loader import ConfigError, find_config_file, load_settings


class TestLoadSettings:
    """Tests for load_settings()."""

    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = load_settings(environ={})
        assert settings.command_timeout_s == 30.0
        assert settings.tool_binary == "openclaw"
        assert settings.server.port == 7337
        assert settings.data_dir == Path.home() / ".ocsec"

    def test_flat_file(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text(textwrap.dedent(f"""\
            data_dir: {tmp_path / "d"}
            command_timeout_s: 12
            tool_binary: claw
            server:
              port: 9000
        """))
        settings = load_settings(path, environ={})
        assert settings.data_dir == tmp_path / "d"
        assert settings.runs_path == tmp_path / "d" / "runs.ndjson"
        assert settings.audit_path == tmp_path / "d" / "audit.ndjson"
        assert settings.command_timeout_s == 12
        assert settings.tool_binary == "claw"
        assert settings.server.port == 9000
        assert settings.server.host == "127.0.0.1"

    def test_wrapped_file(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text("ocsec:\n  history_limit: 7\n")
        assert load_settings(path, environ={}).history_limit == 7

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text("")
        assert load_settings(path, environ={}).tool_binary == "openclaw"

    def test_tilde_expanded(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text("data_dir: ~/sec-history\n")
        assert load_settings(path, environ={}).data_dir == Path.home() / "sec-history"

    def test_env_overrides(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text("command_timeout_s: 12\n")
        settings = load_settings(path, environ={
            "OCSEC_DATA_DIR": str(tmp_path / "env"),
            "OCSEC_TIMEOUT": "3.5",
        })
        assert settings.data_dir == tmp_path / "env"
        assert settings.command_timeout_s == 3.5

    def test_found_by_walking_up(self, tmp_path: Path, monkeypatch):
        (tmp_path / "ocsec.yml").write_text("tool_binary: found\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)
        assert load_settings(environ={}).tool_binary == "found"


class TestConfigErrors:
    """Invalid configuration raises ConfigError."""

    def test_explicit_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_settings(tmp_path / "missing.yml", environ={})

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text("key: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(path, environ={})

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_settings(path, environ={})

    def test_invalid_value(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text("command_timeout_s: -1\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_settings(path, environ={})

    def test_invalid_env_value(self, tmp_path: Path):
        path = tmp_path / "ocsec.yml"
        path.write_text("")
        with pytest.raises(ConfigError):
            load_settings(path, environ={"OCSEC_TIMEOUT": "soon"})


class TestFindConfigFile:
    def test_found_in_start_dir(self, tmp_path: Path):
        (tmp_path / "ocsec.yml").write_text("")
        assert find_config_file(tmp_path) == (tmp_path / "ocsec.yml").resolve()
