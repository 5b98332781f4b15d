"""Persisted cross-invocation state.

Two small JSON files under ~/.wakatime are the only memory shared between
turns. A file that is missing, unreadable, not JSON, or not shaped like its
model is treated as absent; partial content is never trusted.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

StateT = TypeVar("StateT", bound=BaseModel)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


class RateLimitState(BaseModel):
    """Time of the last dispatched heartbeat, epoch milliseconds."""

    model_config = ConfigDict(populate_by_name=True)

    last_heartbeat_at: int | None = Field(default=None, alias="lastHeartbeatAt")


class DependencyState(BaseModel):
    """Last remote version check and the release it found."""

    model_config = ConfigDict(populate_by_name=True)

    last_checked: int | None = Field(default=None, alias="lastChecked")
    version: str | None = None


def to_epoch_ms(moment: datetime) -> int:
    """Convert an aware datetime to integer epoch milliseconds."""
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def load_state(path: Path, model: type[StateT]) -> StateT | None:
    """Load a state file, or None if it is absent or cannot be trusted."""
    try:
        raw_text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.debug("Cannot read state file %s: %s", path, e)
        return None

    try:
        return model.model_validate_json(raw_text)
    except ValidationError as e:
        logger.debug("Ignoring malformed state file %s: %s", path, e)
        return None


def save_state(path: Path, state: BaseModel) -> None:
    """Write a state file as standalone JSON.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = state.model_dump(by_alias=True, exclude_none=True)
    path.write_text(json.dumps(payload, separators=(",", ":")), encoding="utf-8")
