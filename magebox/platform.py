"""Description of the host platform and helpers for locating tools on it."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class PlatformType(str, Enum):
    """Operating system family."""

    DARWIN = "darwin"
    LINUX = "linux"
    UNKNOWN = "unknown"


class LinuxDistro(str, Enum):
    """Linux distribution family."""

    FEDORA = "fedora"
    DEBIAN = "debian"
    ARCH = "arch"
    UNKNOWN = "unknown"


_MKCERT_INSTALL_COMMANDS = {
    LinuxDistro.DEBIAN: "sudo apt install mkcert libnss3-tools",
    LinuxDistro.FEDORA: "sudo dnf install mkcert nss-tools",
    LinuxDistro.ARCH: "sudo pacman -S mkcert nss",
}


@dataclass
class Platform:
    """The machine the tool runs on."""

    type: PlatformType = PlatformType.LINUX
    home_dir: Path = Path.home()
    linux_distro: LinuxDistro = LinuxDistro.UNKNOWN
    is_apple_silicon: bool = False

    def __post_init__(self) -> None:
        self.home_dir = Path(self.home_dir)
        self.type = PlatformType(self.type)
        self.linux_distro = LinuxDistro(self.linux_distro)

    def magebox_dir(self) -> Path:
        """Directory holding all generated configuration."""
        return self.home_dir / ".magebox"

    def homebrew_prefix(self) -> str:
        """Homebrew installation prefix for this machine."""
        return "/opt/homebrew" if self.is_apple_silicon else "/usr/local"

    def php_binary(self, php_version: str) -> str:
        """Path of the PHP CLI binary for the given version."""
        if self.type is PlatformType.DARWIN:
            return f"{self.homebrew_prefix()}/opt/php@{php_version}/bin/php"
        if self.linux_distro is LinuxDistro.FEDORA:
            remi_version = php_version.replace(".", "")
            return f"/opt/remi/php{remi_version}/root/usr/bin/php"
        return f"/usr/bin/php{php_version}"

    def mkcert_install_command(self) -> str:
        """Shell command that installs mkcert on this machine."""
        if self.type is PlatformType.DARWIN:
            return "brew install mkcert nss"
        return _MKCERT_INSTALL_COMMANDS.get(
            self.linux_distro, "install mkcert using your system package manager"
        )


def command_exists(name: str) -> bool:
    """Return True if an executable with this name is on PATH."""
    return shutil.which(name) is not None