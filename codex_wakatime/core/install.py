"""Install/uninstall the Codex notify hook.

Edits the top-level `notify` array in the Codex config.toml. The file is
round-tripped through tomlkit so unrelated keys, tables and comments survive.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import tomlkit
from rich.console import Console
from tomlkit.toml_document import TOMLDocument

from codex_wakatime.core.errors import HookInstallError

PLUGIN_COMMAND = "codex-wakatime"


def _read_document(path: Path) -> TOMLDocument:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return tomlkit.document()
    except OSError as e:
        raise HookInstallError(f"Failed to read {path}: {e}") from e

    try:
        return tomlkit.parse(text)
    except Exception as e:
        raise HookInstallError(f"Failed to parse {path}: {e}") from e


def _write_document(path: Path, doc: TOMLDocument) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(tomlkit.dumps(doc), encoding="utf-8")
    except OSError as e:
        raise HookInstallError(f"Failed writing {path}: {e}") from e


def normalize_notify_value(value: Any) -> list[Any]:
    """Coerce the `notify` value to a list (string means a single entry)."""
    if isinstance(value, list):
        return [item.unwrap() if hasattr(item, "unwrap") else item for item in value]
    if isinstance(value, str):
        return [str(value)]
    return []


def install_hook(
    config_path: Path,
    console: Console | None = None,
    command: str = PLUGIN_COMMAND,
) -> bool:
    """Add `command` to the Codex notify hooks.

    Returns:
        True if the config was changed, False if already configured.

    Raises:
        HookInstallError: If the config cannot be read or written.
    """
    console = console or Console()
    console.print(f"[cyan]Installing {command} notification hook...[/cyan]")

    doc = _read_document(config_path)
    existing = normalize_notify_value(doc.get("notify"))
    if command in existing:
        console.print(f"[yellow]{command} is already configured[/yellow]")
        return False

    doc["notify"] = [*existing, command]
    _write_document(config_path, doc)

    console.print(f"[green]Updated {config_path}[/green]")
    return True


def uninstall_hook(
    config_path: Path,
    console: Console | None = None,
    command: str = PLUGIN_COMMAND,
) -> bool:
    """Remove `command` from the Codex notify hooks.

    Other entries are kept; the key is dropped when nothing remains.

    Returns:
        True if the config was changed.

    Raises:
        HookInstallError: If the config cannot be read or written.
    """
    console = console or Console()
    console.print(f"[cyan]Uninstalling {command} notification hook...[/cyan]")

    if not config_path.exists():
        console.print("[yellow]No Codex config found, nothing to uninstall[/yellow]")
        return False

    doc = _read_document(config_path)
    existing = normalize_notify_value(doc.get("notify"))
    if command not in existing:
        console.print(f"[yellow]{command} was not configured[/yellow]")
        return False

    remaining = [entry for entry in existing if entry != command]
    if remaining:
        doc["notify"] = remaining
    else:
        del doc["notify"]
    _write_document(config_path, doc)

    console.print(f"[green]{command} notification hook removed[/green]")
    return True
