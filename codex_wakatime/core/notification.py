"""Codex notify payload model and parsing."""

from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field, ValidationError

logger = logging.getLogger(__name__)

AGENT_TURN_COMPLETE = "agent-turn-complete"


class Notification(BaseModel):
    """Payload Codex passes as the single CLI argument after each turn.

    `type` is kept as a plain string so unknown event kinds still parse and
    can be ignored explicitly by the orchestrator.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: str
    thread_id: str | None = Field(default=None, alias="thread-id")
    turn_id: str | None = Field(default=None, alias="turn-id")
    cwd: str
    input_messages: list[str] = Field(default_factory=list, alias="input-messages")
    last_assistant_message: str | None = Field(default=None, alias="last-assistant-message")

    @property
    def is_turn_complete(self) -> bool:
        return self.type == AGENT_TURN_COMPLETE


def parse_notification(raw: str | None) -> Notification | None:
    """Parse the notification JSON argument.

    Args:
        raw: The raw CLI argument, if any.

    Returns:
        Parsed notification, or None when the argument is missing, looks like
        a flag, or is not a valid payload.
    """
    if not raw:
        return None

    if raw.startswith("-"):
        return None

    try:
        return Notification.model_validate_json(raw)
    except ValidationError as e:
        logger.debug("Invalid notification payload: %s", e)
        return None
