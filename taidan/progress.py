"""Progress state of a running installation, driven by events."""

from __future__ import annotations

from dataclasses import dataclass
from gettext import gettext as _
from typing import Optional, Union

from taidan.stages import NUM_STAGES, Stage


@dataclass(frozen=True)
class StageChanged:
    """A new stage has started."""

    stage: Stage


@dataclass(frozen=True)
class DnfProgress:
    """The package manager reported a progress fraction."""

    fraction: float


@dataclass(frozen=True)
class FlatpakProgress:
    """Flatpak reported a progress fraction."""

    fraction: float


@dataclass(frozen=True)
class Finished:
    """The installation has completed."""


_Event = Union[StageChanged, DnfProgress, FlatpakProgress, Finished]


@dataclass
class InstallProgress:
    """What the installation screen shows: stage, progress bars and completion."""

    stage: Optional[Stage] = None
    dnf_fraction: float = 0.0
    flatpak_fraction: float = 0.0
    finished: bool = False

    def handle(self, event: _Event) -> None:
        """Update the state from one event."""
        if isinstance(event, StageChanged):
            self.stage = event.stage
        elif isinstance(event, DnfProgress):
            self.dnf_fraction = event.fraction
        elif isinstance(event, FlatpakProgress):
            self.flatpak_fraction = event.fraction
        elif isinstance(event, Finished):
            self.finished = True
        else:
            raise TypeError(f"unknown install event: {event!r}")

    def main_fraction(self) -> float:
        """Fraction of the overall progress bar."""
        if self.stage is None:
            return 0.0
        return int(self.stage) / NUM_STAGES

    def main_text(self) -> str:
        """Text of the overall progress bar."""
        if self.stage is None:
            return _("Loading…")
        return f"[{int(self.stage)}/{NUM_STAGES}] {self.stage.label()}"