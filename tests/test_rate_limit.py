"""Tests for the heartbeat rate limiter."""

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from codex_wakatime.core.rate_limit import RateLimiter
from codex_wakatime.core.state import to_epoch_ms

T0 = datetime(2026, 3, 1, 12, 0, 0, 123000, tzinfo=UTC)


def test_due_without_state(tmp_path: Path):
    limiter = RateLimiter(tmp_path / "codex.json")
    assert limiter.is_due(T0) is True


def test_interval_boundary(tmp_path: Path):
    limiter = RateLimiter(tmp_path / "codex.json")
    limiter.record_success(T0)

    assert limiter.is_due(T0 + timedelta(seconds=59)) is False
    assert limiter.is_due(T0 + timedelta(seconds=60)) is True


def test_record_success_writes_epoch_ms(tmp_path: Path):
    state_path = tmp_path / "nested" / "codex.json"
    limiter = RateLimiter(state_path)
    limiter.record_success(T0)

    payload = json.loads(state_path.read_text(encoding="utf-8"))
    assert payload == {"lastHeartbeatAt": to_epoch_ms(T0)}
    assert limiter.load_state().last_heartbeat_at == to_epoch_ms(T0)


@pytest.mark.parametrize(
    "content",
    ["", "not json", "[1, 2]", '{"lastHeartbeatAt": "soon"}', '{"lastHeartbeatAt": 17'],
)
def test_malformed_state_is_treated_as_absent(tmp_path: Path, content: str):
    state_path = tmp_path / "codex.json"
    state_path.write_text(content, encoding="utf-8")

    assert RateLimiter(state_path).is_due(T0) is True


def test_record_success_write_failure_is_not_raised(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    limiter = RateLimiter(blocker / "codex.json")

    limiter.record_success(T0)

    assert limiter.is_due(T0) is True


def test_custom_interval(tmp_path: Path):
    limiter = RateLimiter(tmp_path / "codex.json", interval_seconds=5)
    limiter.record_success(T0)
    assert limiter.is_due(T0 + timedelta(seconds=4)) is False
    assert limiter.is_due(T0 + timedelta(seconds=5)) is True


def test_invalid_interval():
    with pytest.raises(ValueError, match="must be positive"):
        RateLimiter(Path("unused.json"), interval_seconds=0)
