"""Configuration management with validation.

Supports TOML and YAML configuration files with Pydantic validation. Every
field has a default, so a missing settings file is the normal case.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

from codex_wakatime.core.errors import ConfigError

RELEASES_API_URL = "https://api.github.com/repos/wakatime/wakatime-cli/releases/latest"
DOWNLOAD_URL_TEMPLATE = (
    "https://github.com/wakatime/wakatime-cli/releases/download/{version}/{binary}.zip"
)


class ReporterConfig(BaseModel):
    """Turn reporting behaviour."""

    rate_limit_seconds: float = Field(default=60.0, gt=0)
    category: str = Field(default="ai coding", min_length=1)
    # Require a known extension on top of the syntactic path checks
    strict_extensions: bool = False
    console_verbosity: Literal["debug", "info", "warning", "error"] = Field(default="warning")


class CliConfig(BaseModel):
    """wakatime-cli acquisition and refresh settings."""

    version_check_interval_s: float = Field(default=4 * 60 * 60, gt=0)
    releases_api_url: str = RELEASES_API_URL
    download_url_template: str = DOWNLOAD_URL_TEMPLATE

    @field_validator("download_url_template")
    @classmethod
    def validate_download_template(cls, v: str) -> str:
        """Template must reference the binary name."""
        if "{binary}" not in v:
            raise ValueError("download_url_template must contain '{binary}'")
        return v


class Config(BaseModel):
    """Root configuration model."""

    reporter: ReporterConfig = Field(default_factory=ReporterConfig)
    cli: CliConfig = Field(default_factory=CliConfig)

    model_config = {"extra": "forbid"}


def load_config(path: Path | str) -> Config:
    """Load and validate configuration from file.

    Supports both TOML and YAML formats (detected by extension).

    Args:
        path: Path to configuration file.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If file cannot be read, parsed, or validated.
    """
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        if path.suffix in (".toml",):
            with open(path, "rb") as f:
                data = tomllib.load(f)
        elif path.suffix in (".yaml", ".yml"):
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        else:
            raise ConfigError(f"Unsupported config file extension: {path.suffix}")

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"Failed to parse configuration file {path}: {e}") from e

    try:
        return Config.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Configuration validation failed: {e}") from e


def load_config_or_default(path: Path | str | None = None) -> Config:
    """Load config from file, or return default if file doesn't exist.

    Args:
        path: Optional path to configuration file. If None, returns default.

    Returns:
        Validated Config object.

    Raises:
        ConfigError: If file exists but cannot be parsed or validated.
    """
    if path is None:
        return Config()

    path = Path(path)
    if not path.exists():
        return Config()

    return load_config(path)
