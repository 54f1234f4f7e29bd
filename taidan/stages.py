"""The ordered stages of the installation."""

from __future__ import annotations

import enum
from gettext import gettext as _

NUM_STAGES = 5


class Stage(enum.IntEnum):
    """An installation stage; the value is its position in the run."""

    USER_ADD = 0
    SET_TIME = 1
    SET_THEME = 2
    DNF_DOWNLOAD_UPDATE = 3
    DNF_INSTALL_UPDATE = 4
    DNF_DOWNLOAD_APPS = 5
    DNF_INSTALL_APPS = 6

    def label(self) -> str:
        """Return the translated text shown while the stage runs."""
        return _(_LABELS[self])

    def is_dnf(self) -> bool:
        """Tell whether the stage runs the package manager."""
        return self in _DNF_STAGES


_LABELS = {
    Stage.USER_ADD: "Creating User…",
    Stage.SET_TIME: "Setting Timezone…",
    Stage.SET_THEME: "Configuring Themes…",
    Stage.DNF_DOWNLOAD_UPDATE: "Downloading System Update…",
    Stage.DNF_INSTALL_UPDATE: "Installing System Update…",
    Stage.DNF_DOWNLOAD_APPS: "Downloading User Programs…",
    Stage.DNF_INSTALL_APPS: "Installing User Programs…",
}

_DNF_STAGES = frozenset(
    {
        Stage.DNF_DOWNLOAD_UPDATE,
        Stage.DNF_INSTALL_UPDATE,
        Stage.DNF_DOWNLOAD_APPS,
        Stage.DNF_INSTALL_APPS,
    }
)