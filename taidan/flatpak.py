"""Running flatpak with progress reporting."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Union

from taidan.dnf import ProgressCallback, _as_text, _run_with_progress

FLATPAK = "flatpak"

_FLATPAK_PROGRESS = re.compile(r"[^ ]* ([0-9]+)/([0-9]+) …")


def parse_flatpak_progress(line: Union[str, bytes]) -> Optional[float]:
    """Return the fraction of a ``word n/total …`` line printed by flatpak, or None."""
    match = _FLATPAK_PROGRESS.match(_as_text(line))
    if match is None:
        return None
    denominator = int(match.group(2))
    if denominator == 0:
        return None
    return int(match.group(1)) / denominator


async def run_flatpak(args: Iterable[str], on_progress: ProgressCallback) -> None:
    """Run flatpak with ``args``, reporting progress fractions as they are printed."""
    await _run_with_progress(FLATPAK, args, parse_flatpak_progress, on_progress)