"""Core codex-wakatime modules."""

from codex_wakatime.core.config import CliConfig, Config, ReporterConfig, load_config
from codex_wakatime.core.dependencies import Dependencies
from codex_wakatime.core.errors import (
    CliInstallError,
    CodexWakaTimeError,
    ConfigError,
    HookInstallError,
    UnsupportedPlatformError,
)
from codex_wakatime.core.extractor import (
    ExtractedFile,
    extract_file_paths,
    extract_files,
    is_trackable_extension,
)
from codex_wakatime.core.heartbeat import HeartbeatDispatcher, HeartbeatRequest, HeartbeatResult
from codex_wakatime.core.notification import Notification, parse_notification
from codex_wakatime.core.orchestrator import TurnOrchestrator, TurnOutcome, TurnState
from codex_wakatime.core.rate_limit import RateLimiter

__all__ = [
    # Errors
    "CodexWakaTimeError",
    "ConfigError",
    "UnsupportedPlatformError",
    "CliInstallError",
    "HookInstallError",
    # Config
    "Config",
    "ReporterConfig",
    "CliConfig",
    "load_config",
    # Extraction
    "ExtractedFile",
    "extract_files",
    "extract_file_paths",
    "is_trackable_extension",
    # Pipeline
    "Notification",
    "parse_notification",
    "RateLimiter",
    "Dependencies",
    "HeartbeatRequest",
    "HeartbeatResult",
    "HeartbeatDispatcher",
    "TurnOrchestrator",
    "TurnOutcome",
    "TurnState",
]
