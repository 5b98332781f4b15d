"""Time-based gate between heartbeat reports.

A report is due when no previous heartbeat is on record or when at least
`interval_seconds` have elapsed since the recorded one. Unreadable state
counts as "no previous heartbeat": over-reporting once is preferable to
never reporting again.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from codex_wakatime.core.state import RateLimitState, load_state, save_state, to_epoch_ms

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 60.0


class RateLimiter:
    """Decides whether a new heartbeat is due, backed by a JSON state file."""

    def __init__(self, state_path: Path, interval_seconds: float = DEFAULT_INTERVAL_SECONDS) -> None:
        """Initialize rate limiter.

        Args:
            state_path: Location of the RateLimitState JSON file.
            interval_seconds: Minimum spacing between reports.
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive: {interval_seconds}")

        self.state_path = state_path
        self.interval_seconds = interval_seconds

    def load_state(self) -> RateLimitState:
        """Return persisted state, empty if missing or malformed."""
        return load_state(self.state_path, RateLimitState) or RateLimitState()

    def is_due(self, now: datetime) -> bool:
        """Check whether enough time has passed since the last heartbeat.

        Args:
            now: Current time (timezone-aware).

        Returns:
            True if a heartbeat should be sent.
        """
        last = self.load_state().last_heartbeat_at
        if last is None:
            return True

        elapsed_ms = to_epoch_ms(now) - last
        return elapsed_ms >= self.interval_seconds * 1000

    def record_success(self, now: datetime) -> None:
        """Persist `now` as the last heartbeat time.

        Write failures are logged and swallowed; the heartbeat itself already
        went out.
        """
        state = RateLimitState(last_heartbeat_at=to_epoch_ms(now))
        try:
            save_state(self.state_path, state)
        except OSError as e:
            logger.warning(f"Failed to update rate limit state {self.state_path}: {e}")
