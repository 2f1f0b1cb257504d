"""Configuration management for snitch."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field

DEFAULT_HOST = "gitlab.com"
DEFAULT_CONFIG_PATH = Path(".snitch/config.yaml")

# Environment variables consulted during credential resolution
TOKEN_ENV_VAR = "GITLAB_PERSONAL_TOKEN"
XDG_ENV_VAR = "XDG_CONFIG_HOME"


class Config(BaseModel):
    """snitch configuration.

    Scheme:
        Both issue fetch and issue creation use ``scheme``. Self-hosted
        instances served over plain HTTP need ``scheme: http``.
    """

    default_host: str = Field(default=DEFAULT_HOST, description="Tracker host for bare tokens and CLI lookups")
    scheme: Literal["http", "https"] = Field(default="https", description="URL scheme for tracker API calls")
    timeout: float = Field(default=30.0, gt=0, description="HTTP request timeout in seconds")
    log_level: str = Field(default="WARNING", description="Root logging level")

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file or use defaults."""
        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        if config_path.exists():
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path) -> None:
        """Save configuration to file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False)


class CredentialEnvironment(BaseModel):
    """Snapshot of the process environment used to resolve credentials.

    Captured once and passed to the resolver so that resolution never reads
    ``os.environ`` itself.

    Attributes:
        personal_tokens: Raw value of GITLAB_PERSONAL_TOKEN (comma-separated).
        xdg_config_home: Value of XDG_CONFIG_HOME, None when unset or empty.
        home: Explicit home directory. None means "ask the OS".
    """

    personal_tokens: str = ""
    xdg_config_home: Path | None = None
    home: Path | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> CredentialEnvironment:
        """Build an environment snapshot from ``environ`` (default: os.environ)."""
        if environ is None:
            environ = os.environ

        xdg = environ.get(XDG_ENV_VAR, "")
        return cls(
            personal_tokens=environ.get(TOKEN_ENV_VAR, ""),
            xdg_config_home=Path(xdg) if xdg else None,
        )
