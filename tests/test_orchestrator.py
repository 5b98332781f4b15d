"""Tests for the turn orchestrator state machine."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path

from codex_wakatime.common.paths import RuntimePaths
from codex_wakatime.core.config import ReporterConfig
from codex_wakatime.core.dependencies import Dependencies
from codex_wakatime.core.heartbeat import HeartbeatDispatcher
from codex_wakatime.core.notification import Notification
from codex_wakatime.core.orchestrator import TurnOrchestrator, TurnState
from codex_wakatime.core.rate_limit import RateLimiter
from tests.helpers.cli_archives import FakeRunner, offline_transport

NOW = datetime(2026, 7, 1, 8, 0, tzinfo=UTC)
CLI = "/usr/bin/wakatime-cli"


def _notification(message: str | None, cwd: str = "/work/demo", kind: str = "agent-turn-complete"):
    return Notification.model_validate(
        {
            "type": kind,
            "thread-id": "t-1",
            "turn-id": "turn-1",
            "cwd": cwd,
            "input-messages": ["do things"],
            "last-assistant-message": message,
        }
    )


def _orchestrator(
    tmp_path: Path,
    runner: FakeRunner,
    *,
    cli_on_path: bool = True,
    os_name: str = "linux",
    arch: str = "amd64",
    reporter: ReporterConfig | None = None,
) -> TurnOrchestrator:
    paths = RuntimePaths.under(tmp_path)
    deps = Dependencies(
        paths,
        which=lambda name: CLI if cli_on_path else None,
        client_factory=offline_transport(),
        os_name=os_name,
        arch=arch,
    )
    return TurnOrchestrator(
        RateLimiter(paths.state_file),
        deps,
        reporter,
        dispatcher_factory=lambda cli_path: HeartbeatDispatcher(cli_path, runner=runner),
        clock=lambda: NOW,
    )


def test_file_heartbeats_sent_per_file(tmp_path: Path) -> None:
    runner = FakeRunner()
    orchestrator = _orchestrator(tmp_path, runner)
    message = "Created `src/a.ts`. Read `src/b.ts`. Modified src/a.ts again."

    outcome = orchestrator.handle(_notification(message, cwd="/p"))

    assert outcome.completed
    assert outcome.state is TurnState.STATE_UPDATED
    assert [(r.entity, r.ok) for r in outcome.results] == [("/p/src/a.ts", True), ("/p/src/b.ts", True)]
    assert "--write" in runner.calls[0]
    assert "--write" not in runner.calls[1]
    assert orchestrator.state is TurnState.IDLE
    assert orchestrator.rate_limiter.is_due(NOW) is False


def test_project_fallback_when_no_files(tmp_path: Path) -> None:
    runner = FakeRunner()
    orchestrator = _orchestrator(tmp_path, runner)

    outcome = orchestrator.handle(
        _notification("Check https://example.com/file.ts for reference.", cwd="/work/demo")
    )

    assert outcome.completed
    assert outcome.files == []
    assert len(runner.calls) == 1
    args = runner.calls[0]
    assert args[args.index("--entity") + 1] == "/work/demo"
    assert args[args.index("--entity-type") + 1] == "app"
    assert args[args.index("--project") + 1] == "demo"


def test_absent_message_falls_back(tmp_path: Path) -> None:
    runner = FakeRunner()
    outcome = _orchestrator(tmp_path, runner).handle(_notification(None))
    assert outcome.completed
    assert len(runner.calls) == 1


def test_missing_notification(tmp_path: Path) -> None:
    runner = FakeRunner()
    outcome = _orchestrator(tmp_path, runner).handle(None)
    assert outcome.state is TurnState.IDLE
    assert outcome.reason == "no_notification"
    assert runner.calls == []


def test_other_notification_types_ignored(tmp_path: Path) -> None:
    runner = FakeRunner()
    outcome = _orchestrator(tmp_path, runner).handle(
        _notification("Edited a.py", kind="approval-requested")
    )
    assert outcome.reason == "ignored_type"
    assert runner.calls == []
    assert not (tmp_path / ".wakatime" / "codex.json").exists()


def test_rate_limited_turn(tmp_path: Path) -> None:
    runner = FakeRunner()
    orchestrator = _orchestrator(tmp_path, runner)
    orchestrator.rate_limiter.record_success(NOW - timedelta(seconds=30))

    outcome = orchestrator.handle(_notification("Edited a.py"))

    assert outcome.state is TurnState.IDLE
    assert outcome.reason == "rate_limited"
    assert runner.calls == []


def test_unsupported_platform_stops_before_dispatch(tmp_path: Path) -> None:
    runner = FakeRunner()
    orchestrator = _orchestrator(
        tmp_path, runner, cli_on_path=False, os_name="haiku", arch="ppc"
    )

    outcome = orchestrator.handle(_notification("Edited a.py"))

    assert outcome.reason == "cli_unavailable"
    assert runner.calls == []
    assert orchestrator.rate_limiter.is_due(NOW) is True


def test_dispatch_failures_still_record_success(tmp_path: Path) -> None:
    runner = FakeRunner(fail_for={"/p/a.py"})
    orchestrator = _orchestrator(tmp_path, runner)

    outcome = orchestrator.handle(_notification("Edited a.py and wrote b.py", cwd="/p"))

    assert outcome.completed
    assert [r.ok for r in outcome.results] == [False, True]
    assert orchestrator.rate_limiter.is_due(NOW) is False


def test_unspawnable_path_does_not_abort_turn(tmp_path: Path) -> None:
    runner = FakeRunner(reject_for={"/p/a\x00b.py"})
    orchestrator = _orchestrator(tmp_path, runner)

    outcome = orchestrator.handle(_notification("Edited `a\x00b.py` and wrote `c.py`", cwd="/p"))

    assert outcome.completed
    assert [(r.entity, r.ok) for r in outcome.results] == [("/p/a\x00b.py", False), ("/p/c.py", True)]
    assert orchestrator.rate_limiter.is_due(NOW) is False


def test_category_from_settings(tmp_path: Path) -> None:
    runner = FakeRunner()
    reporter = ReporterConfig(category="coding")
    _orchestrator(tmp_path, runner, reporter=reporter).handle(_notification("Edited a.py"))
    args = runner.calls[0]
    assert args[args.index("--category") + 1] == "coding"
