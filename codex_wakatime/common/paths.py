"""Shared path helpers for codex-wakatime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _env_path(name: str) -> Path | None:
    """Read and normalize a non-empty path env var."""
    raw = os.getenv(name)
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    return Path(text).expanduser()


def get_wakatime_home() -> Path:
    """Return the directory holding `.wakatime.cfg` and the `.wakatime` folder.

    Honors WAKATIME_HOME the same way wakatime-cli does, otherwise the user's
    home directory.
    """
    override = _env_path("WAKATIME_HOME")
    if override is not None:
        return override
    return Path.home()


def get_wakatime_resources_dir() -> Path:
    """Return the per-user cache directory for wakatime-cli and state files."""
    return get_wakatime_home() / ".wakatime"


def get_codex_home() -> Path:
    """Return the Codex configuration directory (CODEX_HOME or ~/.codex)."""
    override = _env_path("CODEX_HOME")
    if override is not None:
        return override
    return Path.home() / ".codex"


@dataclass(frozen=True)
class RuntimePaths:
    """Filesystem locations resolved once per process and injected into components."""

    resources_dir: Path
    state_file: Path
    cli_state_file: Path
    wakatime_cfg: Path
    codex_config: Path
    log_file: Path
    settings_file: Path

    @classmethod
    def from_environment(cls) -> RuntimePaths:
        resources = get_wakatime_resources_dir()
        settings_override = _env_path("CODEX_WAKATIME_CONFIG")
        return cls(
            resources_dir=resources,
            state_file=resources / "codex.json",
            cli_state_file=resources / "codex-cli-state.json",
            wakatime_cfg=get_wakatime_home() / ".wakatime.cfg",
            codex_config=get_codex_home() / "config.toml",
            log_file=resources / "codex.log",
            settings_file=settings_override or resources / "codex-wakatime.toml",
        )

    @classmethod
    def under(cls, root: Path) -> RuntimePaths:
        """Build a fully self-contained layout below `root` (tests, portable installs)."""
        resources = root / ".wakatime"
        return cls(
            resources_dir=resources,
            state_file=resources / "codex.json",
            cli_state_file=resources / "codex-cli-state.json",
            wakatime_cfg=root / ".wakatime.cfg",
            codex_config=root / ".codex" / "config.toml",
            log_file=resources / "codex.log",
            settings_file=resources / "codex-wakatime.toml",
        )
