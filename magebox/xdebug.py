"""Enabling, disabling and configuring Xdebug for installed PHP versions."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from magebox.platform import Platform, PlatformType


class XdebugError(RuntimeError):
    """Raised when Xdebug cannot be installed or toggled."""


@dataclass(frozen=True)
class XdebugConfig:
    """Settings written to the Xdebug ini file."""

    mode: str
    start_with_request: str
    client_host: str
    client_port: str
    ide_key: str


@dataclass
class XdebugStatus:
    """Xdebug state for one PHP version."""

    installed: bool
    enabled: bool
    mode: str = ""
    ini_path: Path | None = None


def default_xdebug_config() -> XdebugConfig:
    return XdebugConfig(
        mode="debug",
        start_with_request="trigger",
        client_host="127.0.0.1",
        client_port="9003",
        ide_key="PHPSTORM",
    )


def generate_xdebug_config(cfg: XdebugConfig) -> str:
    """Render the ini settings for the given configuration."""
    return (
        "; Xdebug configuration\n"
        f"xdebug.mode={cfg.mode}\n"
        f"xdebug.start_with_request={cfg.start_with_request}\n"
        f"xdebug.client_host={cfg.client_host}\n"
        f"xdebug.client_port={cfg.client_port}\n"
        f"xdebug.idekey={cfg.ide_key}\n"
    )


def _is_xdebug_line(line: str, commented: bool) -> bool:
    prefix = ";zend_extension" if commented else "zend_extension"
    return line.startswith(prefix) and "xdebug" in line


class XdebugManager:
    """Finds and edits Xdebug settings; ``root`` prefixes every system path."""

    def __init__(self, platform: Platform, root: str | Path = "/") -> None:
        self.platform = platform
        self.root = Path(root)

    def _system_path(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def _brew_base(self) -> Path:
        return self._system_path(self.platform.homebrew_prefix())

    def _php_modules(self, php_version: str) -> str | None:
        binary = self._system_path(self.platform.php_binary(php_version))
        try:
            return subprocess.run(
                [str(binary), "-m"], check=True, capture_output=True, text=True
            ).stdout
        except (OSError, subprocess.CalledProcessError):
            return None

    def is_installed(self, php_version: str) -> bool:
        if self.find_xdebug_so(php_version) is not None:
            return True
        return self.is_enabled(php_version)

    def is_enabled(self, php_version: str) -> bool:
        """True if ``php -m`` lists the xdebug module."""
        modules = self._php_modules(php_version)
        return modules is not None and "xdebug" in modules.lower()

    def _read_ini(self, php_version: str) -> tuple[Path, str]:
        ini = self.ini_path(php_version)
        if ini is None:
            raise XdebugError(f"xdebug ini file not found for PHP {php_version}")
        try:
            return ini, ini.read_text()
        except OSError as exc:
            raise XdebugError(f"failed to read xdebug ini: {exc}") from exc

    @staticmethod
    def _write_ini(ini: Path, lines: list[str]) -> None:
        try:
            ini.write_text("\n".join(lines))
        except OSError as exc:
            raise XdebugError(f"failed to write xdebug ini: {exc}") from exc

    def enable(self, php_version: str) -> None:
        """Uncomment the zend_extension line and make sure settings are present."""
        ini, content = self._read_ini(php_version)
        lines = content.split("\n")
        modified = False
        for i, line in enumerate(lines):
            trimmed = line.strip()
            if _is_xdebug_line(trimmed, commented=True):
                lines[i] = trimmed.removeprefix(";")
                modified = True
        if modified:
            self._write_ini(ini, lines)

        try:
            self._ensure_config(php_version)
        except OSError as exc:
            raise XdebugError(f"failed to configure xdebug: {exc}") from exc

    def disable(self, php_version: str) -> None:
        """Comment out the zend_extension line."""
        ini, content = self._read_ini(php_version)
        lines = content.split("\n")
        modified = False
        for i, line in enumerate(lines):
            trimmed = line.strip()
            if _is_xdebug_line(trimmed, commented=False):
                lines[i] = ";" + trimmed
                modified = True
        if modified:
            self._write_ini(ini, lines)

    def ini_path(self, php_version: str) -> Path | None:
        """The ini file that loads Xdebug, or None if there is none."""
        if self.platform.type is PlatformType.DARWIN:
            php_dir = self._brew_base() / "etc" / "php" / php_version
            conf_dir = php_dir / "conf.d"
            for name in ("ext-xdebug.ini", "20-xdebug.ini", "xdebug.ini"):
                candidate = conf_dir / name
                if candidate.exists():
                    return candidate

            php_ini = php_dir / "php.ini"
            try:
                if "xdebug" in php_ini.read_text():
                    return php_ini
            except OSError:
                pass

            if self.find_xdebug_so(php_version) is not None:
                return conf_dir / "ext-xdebug.ini"

        elif self.platform.type is PlatformType.LINUX:
            candidate = self._system_path(
                f"/etc/php/{php_version}/mods-available/xdebug.ini"
            )
            if candidate.exists():
                return candidate

        return None

    def find_xdebug_so(self, php_version: str) -> Path | None:
        """Location of xdebug.so in a Homebrew installation, if any."""
        if self.platform.type is not PlatformType.DARWIN:
            return None
        base = self._brew_base()
        cellar = base / "Cellar" / f"php@{php_version}"
        for directory, pattern in (
            (cellar, "*/pecl/*/xdebug.so"),
            (base / "lib" / "php" / "pecl", "*/xdebug.so"),
        ):
            matches = sorted(directory.glob(pattern))
            if matches:
                return matches[0]
        return None

    def _ensure_config(self, php_version: str) -> None:
        ini = self.ini_path(php_version)
        if ini is None:
            return
        content = ini.read_text()
        if "xdebug.mode" in content:
            return
        with ini.open("a") as handle:
            handle.write("\n" + generate_xdebug_config(default_xdebug_config()))

    def install(self, php_version: str) -> None:
        """Install Xdebug with PECL on macOS or apt on Linux."""
        if self.platform.type is PlatformType.DARWIN:
            php_bin = self._system_path(self.platform.php_binary(php_version))
            pecl = php_bin.parent / "pecl"
            if not pecl.exists():
                raise XdebugError(f"PECL not found for PHP {php_version}")
            subprocess.run([str(pecl), "install", "xdebug"], check=True)
            return
        if self.platform.type is PlatformType.LINUX:
            subprocess.run(
                ["sudo", "apt-get", "install", "-y", f"php{php_version}-xdebug"],
                check=True,
            )
            return
        raise XdebugError("unsupported platform")

    def _xdebug_mode(self, php_version: str) -> str:
        ini = self.ini_path(php_version)
        if ini is None:
            return ""
        try:
            with ini.open() as handle:
                for raw in handle:
                    line = raw.strip()
                    if line.startswith("xdebug.mode"):
                        key, sep, value = line.partition("=")
                        if sep:
                            return value.strip()
        except OSError:
            return ""
        return "debug"

    def get_status(self, php_version: str) -> XdebugStatus:
        status = XdebugStatus(
            installed=self.is_installed(php_version),
            enabled=self.is_enabled(php_version),
            ini_path=self.ini_path(php_version),
        )
        if status.installed and status.enabled:
            status.mode = self._xdebug_mode(php_version)
        return status