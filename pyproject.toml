[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "magebox"
version = "0.1.0"
description = "Local development helpers for Magento and MageOS: mkcert certificates, Xdebug toggling, composer.json templates and self-update."
requires-python = ">=3.10"
dependencies = []
keywords = ["magento", "mageos", "xdebug", "mkcert", "ssl", "composer", "development"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: MacOS",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["magebox"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
