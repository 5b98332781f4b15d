"""Error taxonomy for codex-wakatime."""

from __future__ import annotations


class CodexWakaTimeError(Exception):
    """Base exception for all codex-wakatime errors."""

    pass


class ConfigError(CodexWakaTimeError):
    """Raised when configuration is invalid or cannot be loaded."""

    pass


class UnsupportedPlatformError(CodexWakaTimeError):
    """Raised when no wakatime-cli build exists for the current OS/arch pair."""

    def __init__(self, os_name: str, arch: str) -> None:
        """Initialize unsupported platform error.

        Args:
            os_name: Normalized operating system name (e.g. "linux").
            arch: Normalized architecture name (e.g. "amd64").
        """
        self.os_name = os_name
        self.arch = arch
        super().__init__(f"No wakatime-cli build for platform '{os_name}/{arch}'")


class CliInstallError(CodexWakaTimeError):
    """Raised when wakatime-cli cannot be downloaded or unpacked."""

    pass


class HookInstallError(CodexWakaTimeError):
    """Raised when the Codex notify hook cannot be read or written."""

    pass
