"""Command-line interface for codex-wakatime using Typer.

Codex runs `codex-wakatime '<notification json>'` after every agent turn.
The same entry point installs or removes that hook:
- codex-wakatime --install
- codex-wakatime --uninstall
"""

from __future__ import annotations

import logging
from typing import Annotated

import typer
from rich.console import Console

from codex_wakatime import __version__
from codex_wakatime.common.paths import RuntimePaths
from codex_wakatime.core.config import Config, load_config_or_default
from codex_wakatime.core.dependencies import Dependencies
from codex_wakatime.core.errors import ConfigError, HookInstallError
from codex_wakatime.core.install import install_hook, uninstall_hook
from codex_wakatime.core.logging_setup import init_reporter_logging
from codex_wakatime.core.notification import parse_notification
from codex_wakatime.core.options import has_api_key, is_debug_enabled
from codex_wakatime.core.orchestrator import TurnOrchestrator
from codex_wakatime.core.rate_limit import RateLimiter

console = Console()
logger = logging.getLogger("codex_wakatime")

app = typer.Typer(
    name="codex-wakatime",
    help="WakaTime heartbeats for Codex CLI agent turns",
    add_completion=False,
)

# Typer option metadata constants to avoid function calls in annotations/defaults
NOTIFICATION_ARGUMENT = typer.Argument(
    help="Notification JSON passed by Codex",
    show_default=False,
)
INSTALL_OPTION = typer.Option(
    "--install",
    help="Add codex-wakatime to the Codex notify hooks",
)
UNINSTALL_OPTION = typer.Option(
    "--uninstall",
    help="Remove codex-wakatime from the Codex notify hooks",
)
VERSION_OPTION = typer.Option(
    "--version",
    help="Print version and exit",
)


def build_orchestrator(paths: RuntimePaths, config: Config, debug: bool) -> TurnOrchestrator:
    """Wire the pipeline components from resolved paths and settings."""
    return TurnOrchestrator(
        RateLimiter(paths.state_file, config.reporter.rate_limit_seconds),
        Dependencies(paths, config.cli),
        config.reporter,
        debug=debug,
    )


def _run_hook_command(paths: RuntimePaths, uninstall: bool) -> None:
    try:
        if uninstall:
            uninstall_hook(paths.codex_config, console)
            return
        changed = install_hook(paths.codex_config, console)
    except HookInstallError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e

    if changed:
        console.print("[green]codex-wakatime notification hook installed successfully![/green]")
    if not has_api_key(paths.wakatime_cfg):
        console.print(
            f"\n[yellow]Make sure you have your WakaTime API key configured in "
            f"{paths.wakatime_cfg}[/yellow]"
        )


@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def run(
    notification_json: Annotated[str | None, NOTIFICATION_ARGUMENT] = None,
    install: Annotated[bool, INSTALL_OPTION] = False,
    uninstall: Annotated[bool, UNINSTALL_OPTION] = False,
    version: Annotated[bool, VERSION_OPTION] = False,
) -> None:
    """Report the completed Codex turn to WakaTime."""
    paths = RuntimePaths.from_environment()

    if version:
        console.print(__version__)
        return

    if install or uninstall:
        _run_hook_command(paths, uninstall=uninstall and not install)
        return

    config_error: ConfigError | None = None
    try:
        config = load_config_or_default(paths.settings_file)
    except ConfigError as e:
        config, config_error = Config(), e

    debug = is_debug_enabled(paths.wakatime_cfg)
    init_reporter_logging(config.reporter.console_verbosity, debug, paths.log_file)
    if config_error is not None:
        logger.warning(f"Using default settings: {config_error}")

    logger.debug("codex-wakatime %s started", __version__)
    try:
        outcome = build_orchestrator(paths, config, debug).handle(
            parse_notification(notification_json)
        )
    except Exception as e:
        logger.exception("codex-wakatime failed")
        raise typer.Exit(code=1) from e

    logger.debug("codex-wakatime finished: %s", outcome.reason or outcome.state.name)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
