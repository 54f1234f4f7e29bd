"""Running dnf with progress reporting and enabling yum repositories."""

from __future__ import annotations

import asyncio
import logging
import os
import re
import subprocess
import urllib.request
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional, Union

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.toml_document import TOMLDocument

log = logging.getLogger(__name__)

DNF = "dnf5"
YUM_REPOS_DIR = "/etc/yum.repos.d/"

ProgressCallback = Callable[[float], None]
_Line = Union[str, bytes]

_DNF_PROGRESS = re.compile(r"\[([ 0-9]*)/([0-9]+)\]")


def _as_text(line: _Line) -> str:
    if isinstance(line, bytes):
        return line.decode("utf-8", "replace")
    return line


def parse_dnf_progress(line: _Line) -> Optional[float]:
    """Return the fraction of a ``[ n/total]`` line printed by dnf, or None."""
    match = _DNF_PROGRESS.match(_as_text(line))
    if match is None:
        return None
    numerator_text = match.group(1).strip()
    if not numerator_text.isdigit():
        return None
    denominator = int(match.group(2))
    if denominator == 0:
        return None
    return int(numerator_text) / denominator


async def _run_with_progress(
    program: str,
    args: Iterable[str],
    parse: Callable[[bytes], Optional[float]],
    on_progress: ProgressCallback,
) -> None:
    argv = [program, *args]
    proc = await asyncio.create_subprocess_exec(*argv, stdout=asyncio.subprocess.PIPE)
    if proc.stdout is not None:
        async for raw in proc.stdout:
            fraction = parse(raw.rstrip(b"\n"))
            if fraction is not None:
                on_progress(fraction)
    code = await proc.wait()
    if code != 0:
        raise subprocess.CalledProcessError(code, argv)


async def run_dnf(args: Iterable[str], on_progress: ProgressCallback) -> None:
    """Run dnf with ``args``, reporting progress fractions as they are printed."""
    await _run_with_progress(DNF, args, parse_dnf_progress, on_progress)


def _download(url: str) -> str:
    log.debug("Downloading repo file %s", url)
    with urllib.request.urlopen(url) as response:
        return response.read().decode("utf-8")


@dataclass
class RepoEnabler:
    """Repository files kept in memory until :meth:`save` writes the changed ones."""

    directory: Path
    files: dict[Path, TOMLDocument]
    modified: set[Path] = field(default_factory=set)

    @classmethod
    def load(cls, directory: Union[str, os.PathLike[str]] = YUM_REPOS_DIR) -> RepoEnabler:
        """Read every repository file of ``directory``."""
        directory = Path(directory)
        files: dict[Path, TOMLDocument] = {}
        for path in sorted(directory.iterdir()):
            text = path.read_text(encoding="utf-8")
            try:
                files[path] = tomlkit.parse(text)
            except TOMLKitError as exc:
                raise ValueError(f"invalid toml file: {path}") from exc
        return cls(directory, files)

    async def enable_repo(self, repo: str) -> None:
        """Enable a defined repository, or download one given by URL."""
        log.debug("Enabling repo %s", repo)
        for path, doc in self.files.items():
            if repo in doc:
                doc[repo]["enabled"] = 1
                self.modified.add(path)
                return
        if repo.startswith(("https://", "http://")):
            content = await asyncio.to_thread(_download, repo)
            path = self.directory / repo.rsplit("/", 1)[1]
            await asyncio.to_thread(path.write_text, content, encoding="utf-8")
            return
        raise LookupError(
            f"unknown repo `{repo}`: this does not seem like a url, "
            f"and this repo is not installed in {self.directory}"
        )

    def save(self) -> None:
        """Write back the files changed by :meth:`enable_repo`."""
        log.debug("Saving repos")
        for path in self.modified:
            path.write_text(tomlkit.dumps(self.files[path]), encoding="utf-8")