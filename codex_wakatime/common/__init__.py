"""Shared utilities for codex-wakatime."""

from codex_wakatime.common.paths import (
    RuntimePaths,
    get_codex_home,
    get_wakatime_home,
    get_wakatime_resources_dir,
)

__all__ = ["RuntimePaths", "get_codex_home", "get_wakatime_home", "get_wakatime_resources_dir"]
