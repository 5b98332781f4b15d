"""codex-wakatime - WakaTime heartbeats for Codex CLI turns.

Invoked by Codex after each completed agent turn; extracts the files the
assistant touched and reports them through wakatime-cli.
"""

__version__ = "0.1.0"

from codex_wakatime.core import (
    Config,
    Dependencies,
    ExtractedFile,
    HeartbeatDispatcher,
    HeartbeatRequest,
    Notification,
    RateLimiter,
    TurnOrchestrator,
    extract_file_paths,
    extract_files,
)

__all__ = [
    "__version__",
    "Config",
    "Dependencies",
    "ExtractedFile",
    "HeartbeatDispatcher",
    "HeartbeatRequest",
    "Notification",
    "RateLimiter",
    "TurnOrchestrator",
    "extract_file_paths",
    "extract_files",
]
