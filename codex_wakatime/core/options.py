"""Read-only access to the WakaTime INI config (~/.wakatime.cfg).

Only two signals are consumed: the `debug` flag and whether an `api_key`
is present. The key is never read for use; wakatime-cli loads it itself.
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# Keys above the first section header are accepted, as wakatime-cli does
_TOP_SECTION = "__top__"


def read_wakatime_config(path: Path) -> dict[str, str | bool]:
    """Parse the INI file into a flat mapping of keys from every section.

    "true"/"false" values become booleans. Lines without a delimiter are
    skipped; unreadable or unparseable files yield an empty mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return {}

    parser = configparser.ConfigParser(interpolation=None, strict=False, allow_no_value=True)
    try:
        parser.read_string(f"[{_TOP_SECTION}]\n{text}")
    except configparser.Error as e:
        logger.debug("Cannot parse %s: %s", path, e)
        return {}

    values: dict[str, str | bool] = {}
    for section in parser.sections():
        for key, raw in parser.items(section):
            if raw is None:
                continue
            value = raw.strip()
            lowered = value.lower()
            if lowered == "true":
                values[key] = True
            elif lowered == "false":
                values[key] = False
            else:
                values[key] = value
    return values


def is_debug_enabled(path: Path) -> bool:
    """Check if debug mode is enabled."""
    return read_wakatime_config(path).get("debug") is True


def has_api_key(path: Path) -> bool:
    """Check if a WakaTime API key is configured."""
    key = read_wakatime_config(path).get("api_key")
    return isinstance(key, str) and len(key) > 0
