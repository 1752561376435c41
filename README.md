# magebox

Helpers for running Magento and MageOS projects on a local machine. The
package is a library; import the modules you need.

## Modules

- `magebox.platform`: `Platform`, `PlatformType`, `LinuxDistro` and
  `command_exists()`. These describe the host: macOS or Linux, the
  distribution, the Homebrew prefix (`homebrew_prefix()`), the PHP binary
  path for a version (`php_binary()`), the `~/.magebox` directory
  (`magebox_dir()`) and the command that installs mkcert
  (`mkcert_install_command()`).
- `magebox.composer`: `generate_magento_composer_json()` and
  `generate_mageos_composer_json()` return a `composer.json` document, as
  indented JSON text, for a new project at one of the supported versions.
  `get_available_magento_versions()` and `get_available_mageos_versions()`
  list those versions newest first, and `get_latest_magento_version()` and
  `get_latest_mageos_version()` name the newest. An unknown version raises
  `UnsupportedVersionError`.
- `magebox.ssl`: `SSLManager` creates certificates with mkcert under
  `~/.magebox/certs/<domain>/` (`generate_cert()`, `generate_certs()`),
  checks for and lists them (`cert_exists()`, `list_certs()`), removes them
  (`remove_cert()`) and installs the local CA (`install_ca()`,
  `ensure_ca_installed()`). When mkcert is missing it raises
  `MkcertNotInstalledError`, whose message gives the install command for the
  platform. `extract_base_domain()` and `group_domains_by_base()` help pick
  certificate names.
- `magebox.updater`: `Updater` asks the project's release API for the latest
  release (`check_for_update()`, `list_releases()`), compares versions
  (`is_newer_version()`, `parse_version()`), and `update()` downloads the
  asset for this machine (`asset_name()`) and puts it in place of the
  executable, keeping a backup until the move succeeds. Failures raise
  `UpdateError`.
- `magebox.xdebug`: `XdebugManager` finds the Xdebug ini file for a PHP
  version (`ini_path()`), enables and disables the extension by
  uncommenting or commenting its `zend_extension` line (`enable()`,
  `disable()`), appends default settings (`default_xdebug_config()`,
  `generate_xdebug_config()`) when none are present, installs it with PECL
  or apt (`install()`) and reports an `XdebugStatus` (`get_status()`). A
  `root` argument prefixes every system path. Failures raise `XdebugError`.

## Example

```python
from magebox.platform import Platform, PlatformType
from magebox.ssl import SSLManager, extract_base_domain
from magebox.composer import generate_magento_composer_json, get_latest_magento_version

platform = Platform(type=PlatformType.LINUX, home_dir="/home/dev")
ssl = SSLManager(platform)
print(ssl.get_cert_paths(extract_base_domain("api.mystore.test")))

document = generate_magento_composer_json("mystore", get_latest_magento_version())
```

Many operations run external tools (`mkcert`, `php`, `pecl`, `apt-get`,
`sudo`); failures are raised as exceptions.

## What it does not do

There is no command-line program. The package does not start, stop or
configure web servers, PHP-FPM, databases or caches, does not write any
cache server configuration, and does not manage profilers; it covers only
the certificates, Xdebug settings, composer.json templates and self-update
described above.

## Tests

```
pip install -e .[test]
pytest
```