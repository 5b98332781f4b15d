"""Turn orchestration: one notification, one pass.

States:
- IDLE: waiting for (or finished with) a notification
- NOTIFICATION_RECEIVED: an agent-turn-complete payload arrived
- RATE_CHECKED: the rate limiter allowed a report
- DEPENDENCY_CHECKED: wakatime-cli is available
- EXTRACTED: file records pulled from the assistant message
- DISPATCHED: heartbeats handed to wakatime-cli
- STATE_UPDATED: rate limit timestamp recorded

Transitions:
- missing/unknown notification → IDLE
- rate limiter not due → IDLE
- wakatime-cli unavailable → IDLE
- otherwise straight through to STATE_UPDATED, no retries
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum, auto
from pathlib import Path

from codex_wakatime.core.config import ReporterConfig
from codex_wakatime.core.dependencies import Dependencies
from codex_wakatime.core.extractor import ExtractedFile, extract_files
from codex_wakatime.core.heartbeat import HeartbeatDispatcher, HeartbeatRequest, HeartbeatResult
from codex_wakatime.core.notification import Notification
from codex_wakatime.core.rate_limit import RateLimiter

logger = logging.getLogger(__name__)


class TurnState(Enum):
    """Orchestrator state machine states."""

    IDLE = auto()
    NOTIFICATION_RECEIVED = auto()
    RATE_CHECKED = auto()
    DEPENDENCY_CHECKED = auto()
    EXTRACTED = auto()
    DISPATCHED = auto()
    STATE_UPDATED = auto()


@dataclass
class TurnOutcome:
    """Where a turn ended and what it sent.

    Attributes:
        state: Final state; IDLE for early exits.
        reason: Why the turn exited early, if it did.
        files: Files extracted from the message.
        results: One result per wakatime-cli invocation.
    """

    state: TurnState
    reason: str | None = None
    files: list[ExtractedFile] = field(default_factory=list)
    results: list[HeartbeatResult] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.state is TurnState.STATE_UPDATED


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TurnOrchestrator:
    """Sequences rate check, dependency ensure, extraction, dispatch, state update."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        dependencies: Dependencies,
        reporter: ReporterConfig | None = None,
        *,
        debug: bool = False,
        dispatcher_factory: Callable[[Path], HeartbeatDispatcher] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.dependencies = dependencies
        self.reporter = reporter or ReporterConfig()
        self.debug = debug
        self._dispatcher_factory = dispatcher_factory or (
            lambda cli_path: HeartbeatDispatcher(cli_path, debug=debug)
        )
        self._clock = clock
        self._state = TurnState.IDLE

    @property
    def state(self) -> TurnState:
        """Current state (IDLE between turns)."""
        return self._state

    def _exit(self, reason: str) -> TurnOutcome:
        self._state = TurnState.IDLE
        return TurnOutcome(state=TurnState.IDLE, reason=reason)

    def build_requests(self, files: list[ExtractedFile], cwd: str) -> list[HeartbeatRequest]:
        """One file heartbeat per record, or a single project-level fallback."""
        category = self.reporter.category
        if files:
            return [
                HeartbeatRequest(
                    entity=f.path,
                    entity_type="file",
                    category=category,
                    project_folder=cwd,
                    is_write=f.is_write,
                )
                for f in files
            ]

        project = os.path.basename(os.path.normpath(cwd))
        return [
            HeartbeatRequest(
                entity=cwd,
                entity_type="app",
                category=category,
                project=project,
            )
        ]

    def handle(self, notification: Notification | None) -> TurnOutcome:
        """Run one notification through the pipeline.

        Args:
            notification: Parsed payload, or None when none was received.

        Returns:
            TurnOutcome describing where the turn stopped.
        """
        if notification is None:
            logger.debug("No valid notification received")
            return self._exit("no_notification")

        logger.debug("Received notification: %s", notification.type)
        if not notification.is_turn_complete:
            logger.debug("Ignoring notification type: %s", notification.type)
            return self._exit("ignored_type")
        self._state = TurnState.NOTIFICATION_RECEIVED

        if not self.rate_limiter.is_due(self._clock()):
            logger.debug("Skipping heartbeat due to rate limiting")
            return self._exit("rate_limited")
        self._state = TurnState.RATE_CHECKED

        cli_path = self.dependencies.ensure_available(self._clock())
        if cli_path is None:
            logger.warning("wakatime-cli not available, skipping heartbeat")
            return self._exit("cli_unavailable")
        self._state = TurnState.DEPENDENCY_CHECKED

        files = extract_files(
            notification.last_assistant_message,
            notification.cwd,
            strict_extensions=self.reporter.strict_extensions,
        )
        logger.debug("Extracted %d files from message", len(files))
        self._state = TurnState.EXTRACTED

        dispatcher = self._dispatcher_factory(cli_path)
        results = dispatcher.send_all(self.build_requests(files, notification.cwd))
        self._state = TurnState.DISPATCHED

        self.rate_limiter.record_success(self._clock())
        self._state = TurnState.STATE_UPDATED

        outcome = TurnOutcome(state=self._state, files=files, results=results)
        self._state = TurnState.IDLE
        return outcome
