"""composer.json generation for new Magento and MageOS projects."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ComposerVersion:
    """A platform release together with the plugin versions it requires."""

    version: str
    product_version: str
    root_update_plugin: str
    version_audit_plugin: str


class UnsupportedVersionError(ValueError):
    """Raised when a requested release is not known."""


_MAGENTO_VERSIONS = (
    "2.4.7-p3",
    "2.4.7-p2",
    "2.4.7-p1",
    "2.4.7",
    "2.4.6-p7",
    "2.4.6-p6",
    "2.4.5-p9",
)

_MAGEOS_VERSIONS = (
    "2.0.0",
    "1.1.0",
    "1.0.4",
    "1.0.3",
    "1.0.2",
    "1.0.1",
    "1.0.0",
)


def get_magento_versions() -> dict[str, ComposerVersion]:
    """Known Magento releases keyed by version."""
    return {
        v: ComposerVersion(
            version=v,
            product_version=v,
            root_update_plugin="^2.0.4",
            version_audit_plugin="~0.1",
        )
        for v in _MAGENTO_VERSIONS
    }


def get_mageos_versions() -> dict[str, ComposerVersion]:
    """Known MageOS releases keyed by version."""
    return {
        v: ComposerVersion(
            version=v,
            product_version=v,
            root_update_plugin=v,
            version_audit_plugin=v,
        )
        for v in _MAGEOS_VERSIONS
    }


def get_latest_magento_version() -> str:
    return "2.4.7-p3"


def get_latest_mageos_version() -> str:
    return "2.0.0"


def get_available_magento_versions() -> list[str]:
    """Magento releases, newest first."""
    return list(_MAGENTO_VERSIONS)


def get_available_mageos_versions() -> list[str]:
    """MageOS releases, newest first."""
    return list(_MAGEOS_VERSIONS)


def _sorted(mapping: dict[str, Any]) -> dict[str, Any]:
    return dict(sorted(mapping.items()))


def _build(
    *,
    project_name: str,
    description: str,
    vendor: str,
    release: ComposerVersion,
    psr4: dict[str, str],
    exclude_from_classmap: list[str],
    repository_url: str,
) -> str:
    document = {
        "name": f"magebox/{project_name}",
        "description": description,
        "type": "project",
        "license": ["OSL-3.0", "AFL-3.0"],
        "version": release.version,
        "config": {
            "allow-plugins": _sorted(
                {
                    "dealerdirect/phpcodesniffer-composer-installer": True,
                    "laminas/laminas-dependency-plugin": True,
                    f"{vendor}/*": True,
                    "php-http/discovery": True,
                }
            ),
            "preferred-install": "dist",
            "sort-packages": True,
            "audit": {"block-insecure": False},
        },
        "require": _sorted(
            {
                f"{vendor}/product-community-edition": release.product_version,
                f"{vendor}/composer-root-update-plugin": release.root_update_plugin,
                f"{vendor}/composer-dependency-version-audit-plugin": release.version_audit_plugin,
            }
        ),
        "conflict": {"gene/bluefoot": "*"},
        "autoload": {
            "psr-4": _sorted(psr4),
            "psr-0": {"": ["app/code/", "generated/code/"]},
            "files": ["app/etc/NonComposerComponentRegistration.php"],
            "exclude-from-classmap": exclude_from_classmap,
        },
        "minimum-stability": "stable",
        "prefer-stable": True,
        "repositories": [{"type": "composer", "url": repository_url}],
        "extra": {"magento-force": "override"},
    }
    return json.dumps(document, indent=4)


def generate_magento_composer_json(project_name: str, version: str) -> str:
    """Render composer.json for a Magento 2 project."""
    release = get_magento_versions().get(version)
    if release is None:
        raise UnsupportedVersionError(f"unsupported Magento version: {version}")
    return _build(
        project_name=project_name,
        description="Magento 2 project created with MageBox",
        vendor="magento",
        release=release,
        psr4={"Magento\\Setup\\": "setup/src/Magento/Setup/"},
        exclude_from_classmap=["**/dev/**", "**/update/**", "**/Test/**"],
        repository_url="https://repo.magento.com/",
    )


def generate_mageos_composer_json(project_name: str, version: str) -> str:
    """Render composer.json for a MageOS project."""
    release = get_mageos_versions().get(version)
    if release is None:
        raise UnsupportedVersionError(f"unsupported MageOS version: {version}")
    return _build(
        project_name=project_name,
        description="MageOS project created with MageBox",
        vendor="mage-os",
        release=release,
        psr4={
            "Magento\\Framework\\": "lib/internal/Magento/Framework/",
            "Magento\\Setup\\": "setup/src/Magento/Setup/",
            "Magento\\": "app/code/Magento/",
        },
        exclude_from_classmap=["**/dev/**", "**/update/**", "*/*/Test/**/*Test"],
        repository_url="https://repo.mage-os.org/",
    )