from __future__ import annotations

from pathlib import Path

import pytest

from codex_wakatime.common.paths import (
    RuntimePaths,
    get_codex_home,
    get_wakatime_home,
    get_wakatime_resources_dir,
)


def test_wakatime_home_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    override = "/tmp/codex-wakatime-test/home"
    monkeypatch.setenv("WAKATIME_HOME", override)
    assert get_wakatime_home() == Path(override)
    assert get_wakatime_resources_dir() == Path(override) / ".wakatime"


def test_blank_override_ignored(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WAKATIME_HOME", "   ")
    assert get_wakatime_home() == Path.home()


def test_codex_home_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODEX_HOME", "/tmp/codex-wakatime-test/codex")
    assert get_codex_home() == Path("/tmp/codex-wakatime-test/codex")


def test_codex_home_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CODEX_HOME", raising=False)
    assert get_codex_home() == Path.home() / ".codex"


def test_runtime_paths_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("WAKATIME_HOME", "/tmp/wt")
    monkeypatch.setenv("CODEX_HOME", "/tmp/cx")
    monkeypatch.delenv("CODEX_WAKATIME_CONFIG", raising=False)

    paths = RuntimePaths.from_environment()

    assert paths.state_file == Path("/tmp/wt/.wakatime/codex.json")
    assert paths.cli_state_file == Path("/tmp/wt/.wakatime/codex-cli-state.json")
    assert paths.wakatime_cfg == Path("/tmp/wt/.wakatime.cfg")
    assert paths.codex_config == Path("/tmp/cx/config.toml")
    assert paths.log_file == Path("/tmp/wt/.wakatime/codex.log")
    assert paths.settings_file == Path("/tmp/wt/.wakatime/codex-wakatime.toml")


def test_settings_file_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CODEX_WAKATIME_CONFIG", "/etc/codex-wakatime.yaml")
    assert RuntimePaths.from_environment().settings_file == Path("/etc/codex-wakatime.yaml")
