import json
import os
from email.message import Message
from unittest.mock import patch
from urllib.error import HTTPError

import pytest

from magebox.updater import (
    GitHubRelease,
    ReleaseAsset,
    UpdateError,
    UpdateResult,
    Updater,
    get_platform_info,
    parse_version,
)


class _Response:
    def __init__(self, body: bytes, status: int = 200) -> None:
        self._body = body
        self._offset = 0
        self.status = status

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            chunk = self._body[self._offset:]
        else:
            chunk = self._body[self._offset:self._offset + size]
        self._offset += len(chunk)
        return chunk

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


def _json_response(data, status=200):
    return _Response(json.dumps(data).encode(), status)


def test_new_updater_keeps_version():
    u = Updater("0.1.0")
    assert u.current_version == "0.1.0"
    assert u.timeout == 30.0


@pytest.mark.parametrize(
    "current, latest, expected",
    [
        ("0.1.0", "0.2.0", True),
        ("0.1.0", "0.1.1", True),
        ("0.1.0", "1.0.0", True),
        ("0.2.0", "0.1.0", False),
        ("0.1.0", "0.1.0", False),
        ("v0.1.0", "v0.2.0", True),
        ("0.1.0", "v0.2.0", True),
        ("v0.1.0", "0.2.0", True),
        ("1.0.0", "0.9.9", False),
        ("0.10.0", "0.9.0", False),
    ],
)
def test_is_newer_version(current, latest, expected):
    assert Updater(current).is_newer_version(latest) is expected


def test_parse_version_ignores_suffix():
    assert parse_version("1.2.3-beta") == [1, 2, 3]


def test_asset_name_matches_platform():
    name = Updater("0.1.0").asset_name()
    os_name, arch = get_platform_info().split("/")
    assert name.startswith("magebox-")
    assert os_name in name
    assert arch in name


def test_platform_info_has_two_parts():
    parts = get_platform_info().split("/")
    assert len(parts) == 2
    assert all(parts)


def test_release_from_dict():
    release = GitHubRelease.from_dict(
        {
            "tag_name": "v0.2.0",
            "name": "Version 0.2.0",
            "body": "Release notes here",
            "draft": False,
            "prerelease": False,
            "assets": [
                {
                    "name": "magebox-linux-amd64",
                    "browser_download_url": "https://example.com/magebox-linux-amd64",
                    "size": 10000000,
                }
            ],
        }
    )
    assert release.tag_name == "v0.2.0"
    assert len(release.assets) == 1
    assert release.assets[0] == ReleaseAsset(
        name="magebox-linux-amd64",
        browser_download_url="https://example.com/magebox-linux-amd64",
        size=10000000,
    )


def test_check_for_update_selects_platform_asset():
    u = Updater("0.1.0")
    payload = {
        "tag_name": "v0.2.0",
        "body": "Bug fixes",
        "assets": [
            {"name": "magebox-other-os", "browser_download_url": "https://example.com/x"},
            {"name": u.asset_name(), "browser_download_url": "https://example.com/download"},
        ],
    }
    with patch("magebox.updater.urlopen", return_value=_json_response(payload)):
        result = u.check_for_update()
    assert result.current_version == "0.1.0"
    assert result.latest_version == "v0.2.0"
    assert result.update_available is True
    assert result.release_notes == "Bug fixes"
    assert result.download_url == "https://example.com/download"
    assert result.asset_name == u.asset_name()


def test_check_for_update_no_releases():
    error = HTTPError("https://example.com", 404, "Not Found", Message(), None)
    with patch("magebox.updater.urlopen", side_effect=error):
        with pytest.raises(UpdateError, match="no releases found"):
            Updater("0.1.0").check_for_update()


def test_check_for_update_bad_status():
    error = HTTPError("https://example.com", 500, "Server Error", Message(), None)
    with patch("magebox.updater.urlopen", side_effect=error):
        with pytest.raises(UpdateError, match="status 500"):
            Updater("0.1.0").check_for_update()


def test_list_releases_passes_limit():
    payload = [{"tag_name": "v0.2.0"}, {"tag_name": "v0.1.0"}]
    with patch("magebox.updater.urlopen", return_value=_json_response(payload)) as mocked:
        releases = Updater("0.1.0").list_releases(5)
    assert [r.tag_name for r in releases] == ["v0.2.0", "v0.1.0"]
    request = mocked.call_args[0][0]
    assert request.full_url.endswith("per_page=5")
    assert request.get_header("User-agent") == "MageBox-Updater"


def test_update_without_url_fails():
    with pytest.raises(UpdateError, match="no download URL"):
        Updater("0.1.0").update(UpdateResult())


def test_update_replaces_executable(tmp_path):
    exe = tmp_path / "magebox"
    exe.write_bytes(b"old")
    u = Updater("0.1.0", executable=exe)
    result = UpdateResult(download_url="https://example.com/download")
    with patch("magebox.updater.urlopen", return_value=_Response(b"new")):
        u.update(result)
    assert exe.read_bytes() == b"new"
    assert os.access(exe, os.X_OK)
    assert not (tmp_path / "magebox.backup").exists()


def test_update_download_failure_keeps_executable(tmp_path):
    exe = tmp_path / "magebox"
    exe.write_bytes(b"old")
    u = Updater("0.1.0", executable=exe)
    result = UpdateResult(download_url="https://example.com/download")
    with patch("magebox.updater.urlopen", return_value=_Response(b"", status=503)):
        with pytest.raises(UpdateError, match="failed to download update"):
            u.update(result)
    assert exe.read_bytes() == b"old"