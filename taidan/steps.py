"""The work done by each installation stage."""

from __future__ import annotations

import asyncio
import hashlib
import logging
import secrets
from typing import Awaitable, Callable, Dict

from taidan import dnf, theme
from taidan.catalogue import ActionKind, Config
from taidan.flatpak import run_flatpak
from taidan.progress import DnfProgress, FlatpakProgress
from taidan.settings import Settings
from taidan.stages import Stage

log = logging.getLogger(__name__)

Emit = Callable[[object], None]

_CRYPT_ALPHABET = "./0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz"
_SHA512_ROUNDS = 5000
_SHA512_ORDER = (
    (0, 21, 42), (22, 43, 1), (44, 2, 23), (3, 24, 45), (25, 46, 4),
    (47, 5, 26), (6, 27, 48), (28, 49, 7), (50, 8, 29), (9, 30, 51),
    (31, 52, 10), (53, 11, 32), (12, 33, 54), (34, 55, 13), (56, 14, 35),
    (15, 36, 57), (37, 58, 16), (59, 17, 38), (18, 39, 60), (40, 61, 19),
    (62, 20, 41),
)


class StepError(Exception):
    """Raised when an installation stage fails."""


def _b64_from_24bit(b2: int, b1: int, b0: int, count: int) -> str:
    word = (b2 << 16) | (b1 << 8) | b0
    chars = []
    for _ in range(count):
        chars.append(_CRYPT_ALPHABET[word & 0x3F])
        word >>= 6
    return "".join(chars)


def _repeat(digest: bytes, length: int) -> bytes:
    return digest * (length // len(digest)) + digest[: length % len(digest)]


def _sha512_crypt(password: str, salt: str) -> str:
    """Hash a password in the SHA-512 crypt format used by shadow files."""
    key = password.encode("utf-8")
    salt_bytes = salt.encode("utf-8")[:16]
    alternate = hashlib.sha512(key + salt_bytes + key).digest()
    ctx = hashlib.sha512(key + salt_bytes + _repeat(alternate, len(key)))
    length = len(key)
    while length:
        ctx.update(alternate if length & 1 else key)
        length >>= 1
    digest_a = ctx.digest()
    p_bytes = _repeat(hashlib.sha512(key * len(key)).digest(), len(key))
    s_bytes = _repeat(
        hashlib.sha512(salt_bytes * (16 + digest_a[0])).digest(), len(salt_bytes)
    )
    current = digest_a
    for round_no in range(_SHA512_ROUNDS):
        h = hashlib.sha512(p_bytes if round_no & 1 else current)
        if round_no % 3:
            h.update(s_bytes)
        if round_no % 7:
            h.update(p_bytes)
        h.update(current if round_no & 1 else p_bytes)
        current = h.digest()
    encoded = "".join(
        _b64_from_24bit(current[i], current[j], current[k], 4)
        for i, j, k in _SHA512_ORDER
    ) + _b64_from_24bit(0, 0, current[63], 2)
    return f"$6${salt_bytes.decode('utf-8')}${encoded}"


def _hash_password(password: str) -> str:
    salt = "".join(secrets.choice(_CRYPT_ALPHABET) for _ in range(16))
    return _sha512_crypt(password, salt)


async def _run(*argv: str, failure: str) -> None:
    try:
        proc = await asyncio.create_subprocess_exec(*argv)
    except OSError as exc:
        raise StepError(f"fail to run `{argv[0]}`") from exc
    code = await proc.wait()
    if code != 0:
        raise StepError(f"{failure} (exit code: {code})")


def collect_actions(settings: Settings, config: Config) -> None:
    """Add the actions of every selected catalogue choice to ``settings.actions``."""
    for category_name, selected in settings.catalogue.items():
        category = config.find_category(category_name)
        if category is None:
            raise StepError(f"cannot find category `{category_name}`")
        for appidx, opts in selected.items():
            actions = None
            if 0 <= appidx < len(category.choices):
                actions = category.choices[appidx].actions.get_actions(opts)
            if actions is None:
                raise StepError(
                    f"cannot get action: appidx={appidx}, "
                    f"category={category_name}, opts={opts!r}"
                )
            for action in actions:
                settings.actions_of(action.kind).append(action.value)


def prepare_stage(stage: Stage, settings: Settings, config: Config) -> None:
    """Do what a stage needs before it runs."""
    if stage is Stage.DNF_DOWNLOAD_APPS and not settings.nointernet:
        collect_actions(settings, config)


async def _user_add(settings: Settings, emit: Emit) -> None:
    hashed = _hash_password(settings.passwd)
    await _run(
        "useradd", "-p", hashed, "-m", settings.username,
        failure="`useradd` failed",
    )
    await _run(
        "usermod", "-aG", "wheel", settings.username,
        failure="`usermod` failed",
    )


async def _set_time(settings: Settings, emit: Emit) -> None:
    await _run(
        "systemctl", "enable", "systemd-timesyncd.service", "--now",
        failure="cannot enable `systemd-timesyncd.service`",
    )


async def _set_theme(settings: Settings, emit: Emit) -> None:
    await theme.set_theme(settings.username, settings.theme_is_dark, settings.accent)
    await theme.set_night_light(settings.username, settings.nightlight)


def _dnf_progress(emit: Emit) -> Callable[[float], None]:
    return lambda fraction: emit(DnfProgress(fraction))


def _flatpak_progress(emit: Emit) -> Callable[[float], None]:
    return lambda fraction: emit(FlatpakProgress(fraction))


async def _dnf_download_update(settings: Settings, emit: Emit) -> None:
    if settings.nointernet:
        return
    await dnf.run_dnf(["up", "-y", "--downloadonly"], _dnf_progress(emit))


async def _dnf_install_update(settings: Settings, emit: Emit) -> None:
    if settings.nointernet:
        return
    await dnf.run_dnf(["up", "-y"], _dnf_progress(emit))


async def _dnf_download_apps(settings: Settings, emit: Emit) -> None:
    enabler = dnf.RepoEnabler.load(dnf.YUM_REPOS_DIR)
    for repo in settings.actions_of(ActionKind.ENABLE_YUM_REPO):
        await enabler.enable_repo(repo)
    enabler.save()
    for copr in settings.actions_of(ActionKind.COPR):
        await _run(
            "dnf", "copr", "enable", copr,
            failure=f"`dnf copr enable {copr}` failed",
        )
    await asyncio.gather(
        run_flatpak(
            ["install", "-y", "--noninteractive", "--no-deploy",
             *settings.actions_of(ActionKind.FLATPAK)],
            _flatpak_progress(emit),
        ),
        dnf.run_dnf(
            ["in", "-y", "--downloadonly", *settings.actions_of(ActionKind.RPM)],
            _dnf_progress(emit),
        ),
    )


async def _dnf_install_apps(settings: Settings, emit: Emit) -> None:
    if settings.nointernet:
        return
    await asyncio.gather(
        run_flatpak(
            ["install", "-y", "--noninteractive", "--no-pull",
             *settings.actions_of(ActionKind.FLATPAK)],
            _flatpak_progress(emit),
        ),
        dnf.run_dnf(
            ["in", "-y", *settings.actions_of(ActionKind.RPM)],
            _dnf_progress(emit),
        ),
    )
    for script in settings.actions_of(ActionKind.SHELL):
        await _run("sh", "-c", script, failure=f"script failed: {script!r}")


_RUNNERS: Dict[Stage, Callable[[Settings, Emit], Awaitable[None]]] = {
    Stage.USER_ADD: _user_add,
    Stage.SET_TIME: _set_time,
    Stage.SET_THEME: _set_theme,
    Stage.DNF_DOWNLOAD_UPDATE: _dnf_download_update,
    Stage.DNF_INSTALL_UPDATE: _dnf_install_update,
    Stage.DNF_DOWNLOAD_APPS: _dnf_download_apps,
    Stage.DNF_INSTALL_APPS: _dnf_install_apps,
}


async def run_stage(stage: Stage, settings: Settings, emit: Emit) -> None:
    """Run one stage, passing progress events to ``emit``."""
    log.info("Running stage %s", stage.name)
    await _RUNNERS[Stage(stage)](settings, emit)