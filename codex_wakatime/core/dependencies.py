"""Locate, download and refresh the wakatime-cli executable.

Resolution order:
1. `wakatime-cli` on PATH. Authoritative, never version-managed.
2. ~/.wakatime/wakatime-cli-{os}-{arch}[.exe], downloaded from the GitHub
   release on first use and refreshed when a throttled check finds a newer
   release.

None of the public methods raise for network, filesystem or platform
problems; they log and report "unavailable" instead.
"""

from __future__ import annotations

import logging
import os
import platform
import shutil
import subprocess
import sys
import zipfile
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import httpx

from codex_wakatime import __version__
from codex_wakatime.common.paths import RuntimePaths
from codex_wakatime.core.config import CliConfig
from codex_wakatime.core.errors import CliInstallError, UnsupportedPlatformError
from codex_wakatime.core.state import DependencyState, load_state, save_state, to_epoch_ms

logger = logging.getLogger(__name__)

CLI_NAME = "wakatime-cli"
LATEST_DOWNLOAD_URL_TEMPLATE = (
    "https://github.com/wakatime/wakatime-cli/releases/latest/download/{binary}.zip"
)
USER_AGENT = f"codex-wakatime/{__version__}"

OS_ALIASES = {
    "darwin": "darwin",
    "linux": "linux",
    "win32": "windows",
    "cygwin": "windows",
    "msys": "windows",
}

ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "arm": "arm",
    "armv6l": "arm",
    "armv7l": "arm",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "ia32": "386",
}

# (os, arch) -> release asset binary name
BINARY_NAMES: dict[tuple[str, str], str] = {
    ("darwin", "amd64"): "wakatime-cli-darwin-amd64",
    ("darwin", "arm64"): "wakatime-cli-darwin-arm64",
    ("linux", "amd64"): "wakatime-cli-linux-amd64",
    ("linux", "arm64"): "wakatime-cli-linux-arm64",
    ("linux", "arm"): "wakatime-cli-linux-arm",
    ("windows", "amd64"): "wakatime-cli-windows-amd64.exe",
    ("windows", "386"): "wakatime-cli-windows-386.exe",
}


def current_platform(system: str | None = None, machine: str | None = None) -> tuple[str, str]:
    """Return the normalized (os, arch) pair for this interpreter.

    Unknown values pass through lowercased so they miss the lookup table
    instead of being silently coerced.
    """
    raw_os = (system or sys.platform).lower()
    raw_arch = (machine or platform.machine()).lower()
    return OS_ALIASES.get(raw_os, raw_os), ARCH_ALIASES.get(raw_arch, raw_arch)


def binary_name(os_name: str, arch: str) -> str:
    """Look up the release binary name for a platform.

    Raises:
        UnsupportedPlatformError: If no build exists for the pair.
    """
    try:
        return BINARY_NAMES[(os_name, arch)]
    except KeyError:
        raise UnsupportedPlatformError(os_name, arch) from None


def _normalize_version(version: str) -> str:
    return version.strip().removeprefix("v")


def _default_client() -> httpx.Client:
    return httpx.Client(follow_redirects=True, headers={"User-Agent": USER_AGENT})


class Dependencies:
    """Resolves a usable wakatime-cli path for one process invocation."""

    def __init__(
        self,
        paths: RuntimePaths,
        config: CliConfig | None = None,
        *,
        which: Callable[[str], str | None] = shutil.which,
        runner: Callable[..., subprocess.CompletedProcess[str]] = subprocess.run,
        client_factory: Callable[[], httpx.Client] = _default_client,
        os_name: str | None = None,
        arch: str | None = None,
    ) -> None:
        self.paths = paths
        self.config = config or CliConfig()
        self._which = which
        self._runner = runner
        self._client_factory = client_factory
        detected_os, detected_arch = current_platform()
        self.os_name = os_name or detected_os
        self.arch = arch or detected_arch

        self._resolved = False
        self._location: Path | None = None
        self._is_global = False

    @property
    def is_global(self) -> bool:
        """True when the resolved binary came from PATH."""
        return self._is_global

    def global_location(self) -> Path | None:
        """Search PATH for wakatime-cli."""
        name = f"{CLI_NAME}.exe" if self.os_name == "windows" else CLI_NAME
        try:
            found = self._which(name)
        except OSError as e:
            logger.debug("PATH lookup for %s failed: %s", name, e)
            return None
        return Path(found) if found else None

    def local_location(self) -> Path:
        """Path of the cached per-user binary (may not exist yet).

        Raises:
            UnsupportedPlatformError: If no build exists for this platform.
        """
        return self.paths.resources_dir / binary_name(self.os_name, self.arch)

    def locate(self) -> Path | None:
        """Resolve the binary location once per instance.

        Returns:
            PATH hit, else the cached-binary path, else None when the platform
            has no build.
        """
        if self._resolved:
            return self._location

        global_path = self.global_location()
        if global_path is not None:
            self._location = global_path
            self._is_global = True
        else:
            try:
                self._location = self.local_location()
            except UnsupportedPlatformError as e:
                logger.warning(str(e))
                self._location = None

        self._resolved = True
        return self._location

    def is_installed(self) -> bool:
        """Check whether the resolved binary exists on disk."""
        location = self.locate()
        return location is not None and location.exists()

    def ensure_available(self, now: datetime | None = None) -> Path | None:
        """Return a usable wakatime-cli path, downloading it if needed.

        Args:
            now: Current time, used to throttle the version check.

        Returns:
            Absolute path to the binary, or None if none could be provided.
        """
        location = self.locate()
        if location is None:
            return None

        if self._is_global:
            return location

        now = now or datetime.now(UTC)
        if not location.exists():
            logger.info(f"{CLI_NAME} not found at {location}, downloading")
            if not self.install(now=now):
                return None
        else:
            self.check_for_update(now)

        return location if location.exists() else None

    def check_for_update(self, now: datetime) -> bool:
        """Refresh the cached binary when a newer release exists.

        Throttled by DependencyState.last_checked. Every attempt advances the
        throttle; a failed lookup or download keeps the current binary and the
        previously recorded version.

        Returns:
            True if a new binary was installed.
        """
        if self._is_global:
            return False

        location = self.locate()
        if location is None:
            return False

        state = load_state(self.paths.cli_state_file, DependencyState) or DependencyState()
        interval_ms = self.config.version_check_interval_s * 1000
        if state.last_checked is not None and to_epoch_ms(now) - state.last_checked < interval_ms:
            return False

        latest = self.latest_version()
        if latest is None:
            logger.debug("Skipping %s update check; latest release unknown", CLI_NAME)
            self._record_check(now, state.version)
            return False

        installed = self.installed_version(location)
        if installed is not None and _normalize_version(installed) == _normalize_version(latest):
            self._record_check(now, latest)
            return False

        logger.info(f"Updating {CLI_NAME} from {installed or 'unknown'} to {latest}")
        if self.install(latest, now=now):
            return True

        self._record_check(now, state.version)
        return False

    def latest_version(self) -> str | None:
        """Fetch the newest release tag, or None if it cannot be determined."""
        try:
            with self._client_factory() as client:
                response = client.get(
                    self.config.releases_api_url,
                    headers={"Accept": "application/vnd.github+json"},
                )
                response.raise_for_status()
                payload: Any = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("Release lookup failed: %s", e)
            return None

        tag = payload.get("tag_name") if isinstance(payload, dict) else None
        if isinstance(tag, str) and tag:
            return tag
        return None

    def installed_version(self, location: Path) -> str | None:
        """Run `wakatime-cli --version` and return its output."""
        try:
            result = self._runner(
                [str(location), "--version"],
                capture_output=True,
                text=True,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Cannot query %s version: %s", location, e)
            return None

        output = (result.stdout or "").strip()
        if result.returncode != 0 or not output:
            return None
        return output.split()[0]

    def download_url(self, version: str | None) -> str:
        """Release asset URL for this platform's binary."""
        name = binary_name(self.os_name, self.arch)
        if version is None:
            return LATEST_DOWNLOAD_URL_TEMPLATE.format(binary=name)
        return self.config.download_url_template.format(version=version, binary=name)

    def install(self, version: str | None = None, now: datetime | None = None) -> bool:
        """Download and unpack the release binary into the cache directory.

        Args:
            version: Release tag to install; looked up when None, falling
                back to the "latest" download alias if the lookup fails.
            now: Time recorded as the last version check on success.

        Returns:
            True if the binary is in place.
        """
        try:
            target = self.local_location()
            if version is None:
                version = self.latest_version()
            url = self.download_url(version)
            self.paths.resources_dir.mkdir(parents=True, exist_ok=True)
            archive = target.with_name(f"{target.name}.zip.download")
            try:
                self._download(url, archive)
                self._unpack(archive, target)
            finally:
                archive.unlink(missing_ok=True)
        except UnsupportedPlatformError as e:
            logger.warning(str(e))
            return False
        except (httpx.HTTPError, OSError, zipfile.BadZipFile, CliInstallError) as e:
            logger.warning(f"Failed to install {CLI_NAME}: {e}")
            return False

        logger.info(f"Installed {CLI_NAME} at {target}")
        if version is not None:
            self._record_check(now or datetime.now(UTC), version)
        return True

    def _download(self, url: str, destination: Path) -> None:
        logger.debug("Downloading %s", url)
        with self._client_factory() as client:
            with client.stream("GET", url) as response:
                response.raise_for_status()
                with open(destination, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)

    def _unpack(self, archive: Path, target: Path) -> None:
        with zipfile.ZipFile(archive) as zf:
            member = next(
                (name for name in zf.namelist() if Path(name).name == target.name),
                None,
            )
            if member is None:
                raise CliInstallError(f"{target.name} missing from downloaded archive")

            staging = target.with_name(f"{target.name}.tmp")
            try:
                with zf.open(member) as src, open(staging, "wb") as dst:
                    shutil.copyfileobj(src, dst)
                if self.os_name != "windows":
                    staging.chmod(0o755)
                os.replace(staging, target)
            finally:
                staging.unlink(missing_ok=True)

    def _record_check(self, now: datetime, version: str | None) -> None:
        state = DependencyState(last_checked=to_epoch_ms(now), version=version)
        try:
            save_state(self.paths.cli_state_file, state)
        except OSError as e:
            logger.warning(f"Failed to update {CLI_NAME} state: {e}")
