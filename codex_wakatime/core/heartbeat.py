"""Heartbeat requests and their dispatch through wakatime-cli."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from codex_wakatime import __version__

logger = logging.getLogger(__name__)

PLUGIN_NAME = f"codex codex-wakatime/{__version__}"
PROJECT_MARKERS = (".git", ".hg", ".svn")


@dataclass(frozen=True, slots=True)
class HeartbeatRequest:
    """One heartbeat to send.

    Attributes:
        entity: File path, or an app identifier for project-level heartbeats.
        entity_type: "file" or "app".
        category: WakaTime category label.
        project_folder: Folder used to derive the project root.
        project: Explicit project name (used when no folder hint applies).
        is_write: Whether the file was written.
        line_changes: AI-attributed line delta, if known.
    """

    entity: str
    entity_type: Literal["file", "app"]
    category: str = "ai coding"
    project_folder: str | None = None
    project: str | None = None
    is_write: bool = False
    line_changes: int | None = None


@dataclass(frozen=True, slots=True)
class HeartbeatResult:
    """Outcome of one wakatime-cli invocation."""

    entity: str
    ok: bool
    returncode: int | None = None
    detail: str = ""


def detect_project_root(folder: str) -> str:
    """Return the nearest ancestor of `folder` holding a VCS marker.

    Falls back to `folder` itself when none is found.
    """
    start = Path(folder)
    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in PROJECT_MARKERS):
            return str(candidate)
    return folder


class HeartbeatDispatcher:
    """Turns HeartbeatRequests into wakatime-cli subprocess calls."""

    def __init__(
        self,
        cli_path: Path,
        *,
        debug: bool = False,
        runner: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run,
    ) -> None:
        """Initialize dispatcher.

        Args:
            cli_path: Resolved wakatime-cli executable.
            debug: Pass --verbose to wakatime-cli.
            runner: subprocess.run compatible callable.
        """
        self.cli_path = cli_path
        self.debug = debug
        self._runner = runner

    def build_args(self, request: HeartbeatRequest) -> list[str]:
        """Build the wakatime-cli argument vector for a request."""
        args = [
            str(self.cli_path),
            "--entity",
            request.entity,
            "--entity-type",
            request.entity_type,
            "--category",
            request.category,
            "--plugin",
            PLUGIN_NAME,
        ]

        if request.project_folder:
            args.extend(["--project-folder", detect_project_root(request.project_folder)])
        if request.project:
            args.extend(["--project", request.project])
        if request.is_write:
            args.append("--write")
        if request.line_changes is not None:
            args.extend(["--ai-line-changes", str(request.line_changes)])
        if self.debug:
            args.append("--verbose")

        return args

    def send(self, request: HeartbeatRequest) -> HeartbeatResult:
        """Run wakatime-cli for one request.

        Never raises for process failures; the exit status decides success.
        """
        try:
            args = self.build_args(request)
            logger.debug("Running %s", " ".join(args))
            completed = self._runner(args, capture_output=True, text=True, check=False)
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            return HeartbeatResult(entity=request.entity, ok=False, detail=str(e))

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            return HeartbeatResult(
                entity=request.entity,
                ok=False,
                returncode=completed.returncode,
                detail=detail,
            )
        return HeartbeatResult(entity=request.entity, ok=True, returncode=0)

    def send_all(self, requests: Iterable[HeartbeatRequest]) -> list[HeartbeatResult]:
        """Send requests one after another; a failure never stops the rest."""
        results = [self.send(request) for request in requests]

        failed = [r for r in results if not r.ok]
        for result in failed:
            logger.warning(
                f"Heartbeat failed for {result.entity} "
                f"(exit {result.returncode}): {result.detail or 'no output'}"
            )
        logger.debug("Sent %d heartbeat(s), %d failed", len(results), len(failed))
        return results
