"""Local TLS certificates issued through mkcert."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from magebox.platform import Platform, command_exists

_CA_FILE = "rootCA.pem"
_CERT_FILE = "cert.pem"
_KEY_FILE = "key.pem"


@dataclass(frozen=True)
class CertPaths:
    """Locations of a domain's certificate and private key."""

    cert_file: Path
    key_file: Path
    domain: str


class MkcertNotInstalledError(RuntimeError):
    """Raised when mkcert is needed but is not on PATH."""

    def __init__(self, platform: Platform) -> None:
        self.platform = platform
        super().__init__(
            "mkcert is not installed\n\n"
            "Install it with:\n"
            f"  {platform.mkcert_install_command()}\n\n"
            "Then run: magebox ssl:trust\n"
        )


class SSLManager:
    """Creates, lists and removes per-domain certificates."""

    def __init__(self, platform: Platform) -> None:
        self.platform = platform
        self._certs_dir = platform.magebox_dir() / "certs"
        self.ca_installed = False

    def certs_dir(self) -> Path:
        """Directory that holds one sub-directory per domain."""
        return self._certs_dir

    def is_mkcert_installed(self) -> bool:
        return command_exists("mkcert")

    def _require_mkcert(self) -> None:
        if not self.is_mkcert_installed():
            raise MkcertNotInstalledError(self.platform)

    @staticmethod
    def _ca_root() -> Path:
        output = subprocess.run(
            ["mkcert", "-CAROOT"], check=True, capture_output=True, text=True
        ).stdout
        return Path(output.strip())

    def ensure_ca_installed(self) -> None:
        """Install the local CA unless its root certificate already exists."""
        self._require_mkcert()
        try:
            ca_root = self._ca_root()
        except (OSError, subprocess.CalledProcessError) as exc:
            raise RuntimeError(f"failed to get CA root: {exc}") from exc

        if not (ca_root / _CA_FILE).exists():
            try:
                subprocess.run(["mkcert", "-install"], check=True)
            except (OSError, subprocess.CalledProcessError) as exc:
                raise RuntimeError(f"failed to install CA: {exc}") from exc

        self.ca_installed = True

    def is_ca_installed(self) -> bool:
        """True if mkcert is present and its root CA file exists."""
        if not self.is_mkcert_installed():
            return False
        try:
            ca_root = self._ca_root()
        except (OSError, subprocess.CalledProcessError):
            return False
        return (ca_root / _CA_FILE).exists()

    def install_ca(self) -> None:
        """Run ``mkcert -install`` unconditionally."""
        self._require_mkcert()
        proc = subprocess.run(
            ["mkcert", "-install"], stdout=subprocess.PIPE, stderr=subprocess.STDOUT
        )
        if proc.returncode != 0:
            output = proc.stdout.decode(errors="replace")
            raise RuntimeError(
                f"failed to install CA: exit status {proc.returncode}\nOutput: {output}"
            )
        self.ca_installed = True

    def get_cert_paths(self, domain: str) -> CertPaths:
        domain_dir = self._certs_dir / domain
        return CertPaths(
            cert_file=domain_dir / _CERT_FILE,
            key_file=domain_dir / _KEY_FILE,
            domain=domain,
        )

    def cert_exists(self, domain: str) -> bool:
        paths = self.get_cert_paths(domain)
        return paths.cert_file.exists() and paths.key_file.exists()

    def generate_cert(self, domain: str) -> CertPaths:
        """Issue a certificate for the domain and its wildcard, if not present."""
        self._require_mkcert()

        domain_dir = self._certs_dir / domain
        try:
            domain_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RuntimeError(f"failed to create certs directory: {exc}") from exc

        paths = self.get_cert_paths(domain)
        if self.cert_exists(domain):
            return paths

        proc = subprocess.run(
            [
                "mkcert",
                "-cert-file",
                str(paths.cert_file),
                "-key-file",
                str(paths.key_file),
                domain,
                f"*.{domain}",
            ],
            cwd=domain_dir,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        if proc.returncode != 0:
            output = proc.stdout.decode(errors="replace")
            raise RuntimeError(
                f"failed to generate certificate: exit status {proc.returncode}\n"
                f"Output: {output}"
            )
        return paths

    def generate_certs(self, domains: list[str]) -> list[CertPaths]:
        certs = []
        for domain in domains:
            try:
                certs.append(self.generate_cert(domain))
            except Exception as exc:
                raise RuntimeError(
                    f"failed to generate cert for {domain}: {exc}"
                ) from exc
        return certs

    def remove_cert(self, domain: str) -> None:
        """Delete everything stored for the domain; missing is not an error."""
        domain_dir = self._certs_dir / domain
        if domain_dir.is_dir() and not domain_dir.is_symlink():
            shutil.rmtree(domain_dir)
        elif domain_dir.exists() or domain_dir.is_symlink():
            domain_dir.unlink()

    def list_certs(self) -> list[str]:
        """Names of domains that have a certificate directory, sorted."""
        if not self._certs_dir.exists():
            return []
        return sorted(entry.name for entry in self._certs_dir.iterdir() if entry.is_dir())


def extract_base_domain(hostname: str) -> str:
    """Return the last two labels of a hostname, e.g. ``api.shop.test`` -> ``shop.test``."""
    parts = hostname.split(".")
    if len(parts) <= 2:
        return hostname
    return ".".join(parts[-2:])


def group_domains_by_base(domains: list[str]) -> dict[str, list[str]]:
    """Group hostnames under their base domain, keeping input order."""
    groups: dict[str, list[str]] = {}
    for domain in domains:
        groups.setdefault(extract_base_domain(domain), []).append(domain)
    return groups