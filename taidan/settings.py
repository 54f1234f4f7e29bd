"""Choices gathered from the user before installation."""

from __future__ import annotations

from dataclasses import dataclass, field

from taidan.catalogue import ActionKind
from taidan.theme import AccentColor


def _empty_actions() -> dict[ActionKind, list[str]]:
    return {kind: [] for kind in ActionKind}


@dataclass
class Settings:
    """User settings; ``catalogue`` maps category to choice index to option values."""

    skipconfig: bool = False
    nointernet: bool = False
    fullname: str = ""
    username: str = ""
    passwd: str = field(default="", repr=False)
    nightlight: bool = False
    theme_is_dark: bool = False
    accent: AccentColor | None = None
    catalogue: dict[str, dict[int, list[int]]] = field(default_factory=dict)
    actions: dict[ActionKind, list[str]] = field(default_factory=_empty_actions)

    def actions_of(self, kind: ActionKind) -> list[str]:
        """Return the collected action values of one kind."""
        return self.actions[ActionKind(kind)]