import json

import pytest

from codex_wakatime.core.notification import AGENT_TURN_COMPLETE, parse_notification


def _payload(**overrides) -> str:
    data = {
        "type": AGENT_TURN_COMPLETE,
        "thread-id": "th-1",
        "turn-id": "tu-9",
        "cwd": "/work/demo",
        "input-messages": ["fix the bug"],
        "last-assistant-message": "Edited `src/a.py`.",
    }
    data.update(overrides)
    return json.dumps(data)


def test_parse_turn_complete() -> None:
    notification = parse_notification(_payload())
    assert notification is not None
    assert notification.is_turn_complete
    assert notification.thread_id == "th-1"
    assert notification.turn_id == "tu-9"
    assert notification.cwd == "/work/demo"
    assert notification.input_messages == ["fix the bug"]
    assert notification.last_assistant_message == "Edited `src/a.py`."


def test_parse_null_message() -> None:
    notification = parse_notification(_payload(**{"last-assistant-message": None}))
    assert notification is not None
    assert notification.last_assistant_message is None


def test_parse_other_type_is_kept_but_not_complete() -> None:
    notification = parse_notification(_payload(type="something-else"))
    assert notification is not None
    assert notification.is_turn_complete is False


@pytest.mark.parametrize("raw", [None, "", "--verbose", "{not json", "[]", '{"type": "agent-turn-complete"}'])
def test_parse_invalid_returns_none(raw) -> None:
    assert parse_notification(raw) is None
