"""Catalogue of installable choices and the distribution configuration."""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence, Union

import yaml

log = logging.getLogger(__name__)

CATALOGUE_DIR_ENV = "TAIDAN_CATALOGUE_DIR"
OS_RELEASE = "/etc/os-release"
ONLY_ALLOW_OPT_KEY = "Only one of `radio:`/`checkbox:` is allowed."


class CatalogueError(Exception):
    """Raised when a catalogue or system description cannot be read."""


class ActionKind(enum.IntEnum):
    """Kinds of install actions, numbered as the settings store them."""

    ENABLE_YUM_REPO = 0
    RPM = 1
    FLATPAK = 2
    SHELL = 3
    COPR = 4

    @property
    def key(self) -> str:
        return self.name.lower()


_KINDS_BY_KEY = {kind.key: kind for kind in ActionKind}


@dataclass(frozen=True)
class Action:
    """A single install action such as an rpm or flatpak to install."""

    kind: ActionKind
    value: str

    @classmethod
    def from_pair(cls, key: str, value: str) -> Action:
        try:
            kind = _KINDS_BY_KEY[key]
        except KeyError:
            raise CatalogueError(
                f"Unknown action type `{key}` (value `{value}`)"
            ) from None
        return cls(kind, value)


@dataclass(frozen=True)
class Checkbox:
    """An on/off option of a choice."""

    label: str

    def dimension(self) -> int:
        return 2


@dataclass(frozen=True)
class Radio:
    """An option of a choice with one of several values."""

    choices: tuple[str, ...]

    def dimension(self) -> int:
        return len(self.choices)


ChoiceOption = Union[Checkbox, Radio]


@dataclass(frozen=True)
class ChoiceActions:
    """A tree of actions indexed by the selected option values.

    Inner nodes hold ``children``; leaves hold ``actions`` or are ``todo``.
    """

    children: tuple[ChoiceActions, ...] | None = None
    actions: tuple[Action, ...] = ()
    todo: bool = False

    @classmethod
    def parse(cls, value: str) -> ChoiceActions:
        """Parse a leaf such as ``rpm:foo``, ``rpm:a;flatpak:b`` or ``todo``."""
        if value == "todo":
            log.warning("Found todo. This should not be propagated to production!")
            return cls(todo=True)
        if ";" in value:
            pairs = (part.split(":", 1) for part in value.split(";") if ":" in part)
            return cls(actions=tuple(Action.from_pair(k, v) for k, v in pairs))
        key, sep, rest = value.partition(":")
        if not sep:
            log.warning("Found action `%s` (no type), treating as shell script", value)
            return cls(actions=(Action(ActionKind.SHELL, value),))
        return cls(actions=(Action.from_pair(key, rest),))

    def get_actions(self, opts: Sequence[int]) -> tuple[Action, ...] | None:
        """Return the actions for the given option values, or None if there are none."""
        node = self
        for idx in opts:
            if node.children is None or not 0 <= idx < len(node.children):
                return None
            node = node.children[idx]
        if node.todo or node.children is not None:
            return None
        return node.actions


def _parse_option(opt: Any) -> ChoiceOption:
    if not isinstance(opt, dict):
        raise CatalogueError(f"Expected yaml mapping, found {opt!r}")
    if len(opt) != 1:
        raise CatalogueError(
            f"Unexpected {len(opt)}-key element in `options:`. {ONLY_ALLOW_OPT_KEY}"
        )
    ((key, value),) = opt.items()
    if not isinstance(key, str):
        raise CatalogueError(
            f"Unexpected key `{key!r}`, value `{value!r}` in `options:`. "
            f"{ONLY_ALLOW_OPT_KEY} Only sequences are accepted as values."
        )
    if key == "checkbox":
        if not isinstance(value, str):
            raise CatalogueError(f"Expected string, found `{value!r}` in `checkbox:`")
        return Checkbox(value)
    if key == "radio":
        if not isinstance(value, list):
            raise CatalogueError(f"Expected sequence, found `{value!r}` in `radio:`")
        for item in value:
            if not isinstance(item, str):
                raise CatalogueError(
                    f"Expected string, found `{item!r}` in `radio:` sequence"
                )
        return Radio(tuple(value))
    raise CatalogueError(f"Unexpected key `{key}:` in `options:`. {ONLY_ALLOW_OPT_KEY}")


def _build_actions(value: Any, dimension: Sequence[int], depth: int) -> ChoiceActions:
    if depth == len(dimension):
        if not isinstance(value, str):
            raise CatalogueError(
                f"Expected string at depth {depth} of `actions:`, found {value!r}"
            )
        try:
            return ChoiceActions.parse(value)
        except CatalogueError as exc:
            raise CatalogueError(f"Cannot parse action: {exc}") from exc
    expected = dimension[depth]
    if isinstance(value, list):
        if len(value) != expected:
            raise CatalogueError(
                f"Expected at depth {depth} of `actions:` a sequence of {expected}, "
                f"found {len(value)}"
            )
        return ChoiceActions(
            children=tuple(_build_actions(v, dimension, depth + 1) for v in value)
        )
    if value == "todo":
        return ChoiceActions(
            children=tuple(
                _build_actions(value, dimension, depth + 1) for _ in range(expected)
            )
        )
    raise CatalogueError(
        f"Expected yaml sequence at `actions:` with dimension {list(dimension)} "
        f"(currently depth {depth}), found {value!r}"
    )


def _require_str(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise CatalogueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise CatalogueError(f"Expected string for `{key}`, found {value!r}")
    return value


def _flatten(text: str) -> str:
    return text.replace("\n", " ").rstrip()


@dataclass(frozen=True)
class Choice:
    """One installable entry of a category."""

    name: str
    provider: str
    description: str
    note: str | None
    options: tuple[ChoiceOption, ...]
    actions: ChoiceActions

    @classmethod
    def from_mapping(cls, data: Any) -> Choice:
        if not isinstance(data, Mapping):
            raise CatalogueError(f"Expected yaml mapping for choice, found {data!r}")
        name = _require_str(data, "name")
        provider = _require_str(data, "provider")
        description = _require_str(data, "description")
        note = data.get("note")
        if note is not None and not isinstance(note, str):
            raise CatalogueError(f"Expected string for `note`, found {note!r}")
        raw_options = data.get("options", [])
        if not isinstance(raw_options, list):
            raise CatalogueError(f"Expected sequence for `options`, found {raw_options!r}")
        if "actions" not in data:
            raise CatalogueError("missing field `actions`")
        options = tuple(_parse_option(opt) for opt in raw_options)
        actions = _build_actions(
            data["actions"], [opt.dimension() for opt in options], 0
        )
        return cls(
            name=name,
            provider=provider,
            description=_flatten(description),
            note=None if note is None else _flatten(note),
            options=options,
            actions=actions,
        )


@dataclass(frozen=True)
class Category:
    """A named group of choices."""

    name: str
    choices: tuple[Choice, ...]

    @classmethod
    def from_mapping(cls, data: Any) -> Category:
        if not isinstance(data, Mapping):
            raise CatalogueError(f"Expected yaml mapping for category, found {data!r}")
        name = _require_str(data, "category")
        if "choices" not in data:
            raise CatalogueError("missing field `choices`")
        raw_choices = data["choices"]
        if not isinstance(raw_choices, list):
            raise CatalogueError(f"Expected sequence for `choices`, found {raw_choices!r}")
        return cls(name, tuple(Choice.from_mapping(c) for c in raw_choices))


def load_category(path: str | os.PathLike[str]) -> Category:
    """Read one category from a yaml file."""
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except OSError as exc:
        raise CatalogueError(f"Cannot read catalogue file {path}") from exc
    except yaml.YAMLError as exc:
        raise CatalogueError(f"Invalid yaml in {path}: {exc}") from exc
    try:
        return Category.from_mapping(data)
    except CatalogueError as exc:
        raise CatalogueError(f"{path}: {exc}") from exc


def load_catalogue(directory: str | os.PathLike[str]) -> list[Category]:
    """Read every category file in a directory."""
    log.debug("Reading catalogue from %s", directory)
    try:
        entries = sorted(Path(directory).iterdir())
    except OSError as exc:
        raise CatalogueError(f"Cannot read catalogue dir: {directory}") from exc
    return [load_category(entry) for entry in entries]


def catalogue_dir(default: str | os.PathLike[str]) -> Path:
    """Return the catalogue directory, preferring the environment override."""
    override = os.environ.get(CATALOGUE_DIR_ENV)
    if override is not None:
        path = Path(override)
        if path.is_dir():
            return path
        log.error("%s is set but no such directory: %s", CATALOGUE_DIR_ENV, path)
    return Path(default)


def read_distro_name(path: str | os.PathLike[str] = OS_RELEASE) -> str:
    """Return the NAME= value of an os-release file, without surrounding quotes."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogueError(f"Cannot read {path}") from exc
    for line in text.split("\n"):
        if line.startswith("NAME="):
            name = line[len("NAME="):]
            if len(name) >= 2 and name.startswith('"') and name.endswith('"'):
                return name[1:-1]
            return name
    raise CatalogueError(f"Cannot find NAME=… in {path}")


@dataclass
class Config:
    """Distribution name and the catalogue offered to the user."""

    distro: str = ""
    catalogue: list[Category] = field(default_factory=list)

    @classmethod
    def load(
        cls,
        default_catalogue_dir: str | os.PathLike[str],
        os_release: str | os.PathLike[str] = OS_RELEASE,
    ) -> Config:
        config = cls(
            distro=read_distro_name(os_release),
            catalogue=load_catalogue(catalogue_dir(default_catalogue_dir)),
        )
        log.debug("Loaded config: %r", config)
        return config

    def find_category(self, name: str) -> Category | None:
        return next((cat for cat in self.catalogue if cat.name == name), None)