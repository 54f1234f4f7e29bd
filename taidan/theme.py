"""Desktop theme, accent colour and night light configuration."""

from __future__ import annotations

import asyncio
import enum
import logging
import os
import pwd
import subprocess

log = logging.getLogger(__name__)

PLASMA_APPLY_COLORSCHEME = "/usr/bin/plasma-apply-colorscheme"
GSETTINGS = "/usr/bin/gsettings"
KWRITECONFIG = "kwriteconfig6"


async def _run(*argv: str) -> None:
    proc = await asyncio.create_subprocess_exec(*argv)
    code = await proc.wait()
    if code != 0:
        raise subprocess.CalledProcessError(code, list(argv))


def _current_user() -> str:
    return pwd.getpwuid(os.getuid()).pw_name


class AccentColor(enum.Enum):
    """Accent colours offered by the desktop settings schemas."""

    BLUE = "blue"
    TEAL = "teal"
    GREEN = "green"
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"
    PINK = "pink"
    PURPLE = "purple"
    SLATE = "slate"

    def __str__(self) -> str:
        return self.value

    def w3_color_keywords(self) -> str:
        """Return the CSS colour keyword for this accent."""
        if self is AccentColor.SLATE:
            return "slategrey"
        return self.value

    async def gsettings(self, user: str, is_dark: bool) -> None:
        """Apply accent, colour scheme and GTK theme through gsettings."""
        base = ("pkexec", "--user", user, "gsettings", "set", "org.gnome.desktop.interface")
        await _run(*base, "accent-color", self.value)
        await _run(*base, "color-scheme", "prefer-dark" if is_dark else "default")
        await _run(*base, "gtk-theme", "Adwaita-dark" if is_dark else "Adwaita")

    async def plasma(self, user: str, is_dark: bool) -> None:
        """Apply the Breeze colour scheme with this accent on Plasma."""
        scheme = "BreezeDark" if is_dark else "BreezeLight"
        await _run(
            "pkexec", "--user", user, "plasma-apply-colorscheme",
            scheme, "-a", self.w3_color_keywords(),
        )


async def plasma_set_theme_only(user: str, is_dark: bool) -> None:
    """Apply the light or dark Breeze colour scheme on Plasma."""
    scheme = "BreezeDark" if is_dark else "BreezeLight"
    await _run("pkexec", "--user", user, "plasma-apply-colorscheme", scheme)


async def set_theme(
    user: str | None, is_dark: bool, accent: AccentColor | None
) -> None:
    """Set theme and accent with whichever desktop tool is installed."""
    user = user if user is not None else _current_user()
    log.debug("setting theme for %s", user)
    if os.path.exists(PLASMA_APPLY_COLORSCHEME):
        if accent is not None:
            await accent.plasma(user, is_dark)
        else:
            await plasma_set_theme_only(user, is_dark)
    elif os.path.exists(GSETTINGS):
        await (accent or AccentColor.BLUE).gsettings(user, is_dark)
    else:
        raise RuntimeError(
            "Neither plasma-apply-colorscheme and gsettings are found in /usr/bin"
        )


async def set_night_light(user: str | None, enabled: bool) -> None:
    """Turn night light on or off for the user."""
    user = user if user is not None else _current_user()
    log.debug("setting night light for %s", user)
    flag = "true" if enabled else "false"
    if os.path.exists(KWRITECONFIG):
        await _run(
            "pkexec", "--user", user, "kwriteconfig6",
            "--file", "~/.config/kwinrc", "--group", "NightColor",
            "--key", "Active", "--type", "bool", flag,
        )
    else:
        await _run(
            "pkexec", "--user", user, "gsettings",
            "set", "org.gnome.settings-daemon.plugins.color",
            "night-light-enabled", flag,
        )