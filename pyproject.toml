[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "taidan"
version = "0.1.0"
description = "First-boot system setup backend: catalogue parsing, theming and staged package installation"
requires-python = ">=3.10"
keywords = ["setup", "first-boot", "dnf", "flatpak", "installer", "oobe"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Installation/Setup",
]
dependencies = [
    "pyyaml",
    "tomlkit",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["taidan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
