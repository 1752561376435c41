"""Self-update from the project's published releases."""

from __future__ import annotations

import json
import os
import platform
import re
import shutil
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.error import HTTPError
from urllib.request import Request, urlopen

GITHUB_OWNER = "qoliber"
GITHUB_REPO = "magebox"
GITHUB_API_URL = "https://api.github.com"

_HEADERS = {
    "Accept": "application/vnd.github.v3+json",
    "User-Agent": "MageBox-Updater",
}

_ARCH_NAMES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
}

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class UpdateError(RuntimeError):
    """Raised when checking for or installing an update fails."""


@dataclass
class ReleaseAsset:
    """A downloadable file attached to a release."""

    name: str = ""
    browser_download_url: str = ""
    size: int = 0
    content_type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReleaseAsset:
        return cls(
            name=data.get("name") or "",
            browser_download_url=data.get("browser_download_url") or "",
            size=int(data.get("size") or 0),
            content_type=data.get("content_type") or "",
        )


@dataclass
class GitHubRelease:
    """A published release."""

    tag_name: str = ""
    name: str = ""
    body: str = ""
    draft: bool = False
    prerelease: bool = False
    published_at: str = ""
    assets: list[ReleaseAsset] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GitHubRelease:
        return cls(
            tag_name=data.get("tag_name") or "",
            name=data.get("name") or "",
            body=data.get("body") or "",
            draft=bool(data.get("draft", False)),
            prerelease=bool(data.get("prerelease", False)),
            published_at=data.get("published_at") or "",
            assets=[ReleaseAsset.from_dict(a) for a in data.get("assets") or []],
        )


@dataclass
class UpdateResult:
    """Outcome of an update check."""

    current_version: str = ""
    latest_version: str = ""
    update_available: bool = False
    release_notes: str = ""
    download_url: str = ""
    asset_name: str = ""


def _os_name() -> str:
    return platform.system().lower()


def _arch_name() -> str:
    machine = platform.machine().lower()
    return _ARCH_NAMES.get(machine, machine)


def get_platform_info() -> str:
    """``os/arch`` of the running machine."""
    return f"{_os_name()}/{_arch_name()}"


def parse_version(version: str) -> list[int]:
    """Numeric parts of a dotted version; suffixes such as ``-beta`` are ignored."""
    parts = []
    for part in version.split("."):
        match = _LEADING_INT.match(part.split("-")[0])
        parts.append(int(match.group(1)) if match else 0)
    return parts


class Updater:
    """Checks for newer releases and replaces the running executable."""

    def __init__(
        self,
        current_version: str,
        executable: str | os.PathLike[str] | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.current_version = current_version
        self.executable = Path(executable if executable is not None else sys.argv[0])
        self.timeout = timeout

    def _get_json(self, url: str, not_found_message: str | None = None) -> Any:
        request = Request(url, headers=_HEADERS, method="GET")
        try:
            with urlopen(request, timeout=self.timeout) as response:
                status = response.status
                payload = response.read()
        except HTTPError as exc:
            if exc.code == 404 and not_found_message:
                raise UpdateError(not_found_message) from exc
            raise UpdateError(f"GitHub API returned status {exc.code}") from exc
        if status != 200:
            raise UpdateError(f"GitHub API returned status {status}")
        return json.loads(payload)

    def _latest_release(self) -> GitHubRelease:
        url = f"{GITHUB_API_URL}/repos/{GITHUB_OWNER}/{GITHUB_REPO}/releases/latest"
        try:
            data = self._get_json(url, not_found_message="no releases found")
        except json.JSONDecodeError as exc:
            raise UpdateError(f"failed to parse release data: {exc}") from exc
        return GitHubRelease.from_dict(data)

    def check_for_update(self) -> UpdateResult:
        """Compare the latest release with the running version."""
        try:
            release = self._latest_release()
        except (UpdateError, OSError) as exc:
            raise UpdateError(f"failed to check for updates: {exc}") from exc

        result = UpdateResult(
            current_version=self.current_version,
            latest_version=release.tag_name,
            update_available=self.is_newer_version(release.tag_name),
            release_notes=release.body,
        )
        wanted = self.asset_name()
        asset = next((a for a in release.assets if a.name == wanted), None)
        if asset is not None:
            result.download_url = asset.browser_download_url
            result.asset_name = asset.name
        return result

    def _download(self, url: str) -> Path:
        with urlopen(url, timeout=self.timeout) as response:
            if response.status != 200:
                raise UpdateError(f"download failed with status {response.status}")
            with tempfile.NamedTemporaryFile(
                prefix="magebox-update-", delete=False
            ) as tmp:
                tmp_path = Path(tmp.name)
                try:
                    shutil.copyfileobj(response, tmp)
                except Exception:
                    tmp.close()
                    tmp_path.unlink(missing_ok=True)
                    raise
        return tmp_path

    def update(self, result: UpdateResult) -> None:
        """Download the release asset and put it in place of the executable."""
        if not result.download_url:
            raise UpdateError(f"no download URL available for {get_platform_info()}")

        exec_path = Path(os.path.realpath(self.executable))

        try:
            tmp_path = self._download(result.download_url)
        except (UpdateError, OSError) as exc:
            raise UpdateError(f"failed to download update: {exc}") from exc

        try:
            try:
                os.chmod(tmp_path, 0o755)
            except OSError as exc:
                raise UpdateError(f"failed to set permissions: {exc}") from exc

            backup = exec_path.with_name(exec_path.name + ".backup")
            try:
                os.rename(exec_path, backup)
            except OSError as exc:
                raise UpdateError(f"failed to backup current binary: {exc}") from exc

            try:
                shutil.move(str(tmp_path), str(exec_path))
            except OSError as exc:
                try:
                    os.rename(backup, exec_path)
                except OSError:
                    pass
                raise UpdateError(f"failed to install new binary: {exc}") from exc

            backup.unlink(missing_ok=True)
        finally:
            tmp_path.unlink(missing_ok=True)

    def is_newer_version(self, version: str) -> bool:
        """True if ``version`` is strictly newer than the running version."""
        current = parse_version(self.current_version.removeprefix("v"))
        latest = parse_version(version.removeprefix("v"))
        width = max(len(current), len(latest))
        current += [0] * (width - len(current))
        latest += [0] * (width - len(latest))
        return latest > current

    def asset_name(self) -> str:
        """Name of the release asset built for this machine."""
        return f"magebox-{_os_name()}-{_arch_name()}"

    def list_releases(self, limit: int) -> list[GitHubRelease]:
        """The most recent releases, at most ``limit`` of them."""
        url = (
            f"{GITHUB_API_URL}/repos/{GITHUB_OWNER}/{GITHUB_REPO}/releases"
            f"?per_page={limit}"
        )
        try:
            data = self._get_json(url)
        except json.JSONDecodeError as exc:
            raise UpdateError(f"failed to parse releases: {exc}") from exc
        return [GitHubRelease.from_dict(item) for item in data or []]