"""
Settings model — runtime configuration loaded from ocsec.yml.

Everything has a default, so the tool runs without any config file.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class ServerSettings(BaseModel):
    """Local dashboard server."""

    host: str = "127.0.0.1"
    port: int = Field(default=7337, ge=1, le=65535)


class Settings(BaseModel):
    """Root settings model."""

    data_dir: Path = Field(default_factory=lambda: Path.home() / ".ocsec")
    command_timeout_s: float = Field(default=30.0, gt=0)
    tool_binary: str = "openclaw"
    history_limit: int = Field(default=50, ge=1)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def _expand_user(cls, value: object) -> object:
        if isinstance(value, str):
            return Path(value).expanduser()
        if isinstance(value, Path):
            return value.expanduser()
        return value

    @property
    def runs_path(self) -> Path:
        return self.data_dir / "runs.ndjson"

    @property
    def audit_path(self) -> Path:
        return self.data_dir / "audit.ndjson"
