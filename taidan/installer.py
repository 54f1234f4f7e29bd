"""Running the installation stages in order."""

from __future__ import annotations

import logging
from typing import Callable

from taidan.catalogue import Config
from taidan.progress import Finished, StageChanged
from taidan.settings import Settings
from taidan.stages import Stage
from taidan.steps import prepare_stage, run_stage

log = logging.getLogger(__name__)

Emit = Callable[[object], None]


async def start_install(settings: Settings, config: Config, emit: Emit) -> None:
    """Run every stage, announcing each one and the completion through ``emit``."""
    log.info("Starting installation")
    for stage in Stage:
        log.debug("Preparing stage %s", stage.name)
        prepare_stage(stage, settings, config)
        emit(StageChanged(stage))
        await run_stage(stage, settings, emit)
    emit(Finished())


async def start_simple_install(settings: Settings, emit: Emit) -> None:
    """Only create the user and set the time, then announce completion."""
    log.info("Starting installation")
    await run_stage(Stage.USER_ADD, settings, emit)
    await run_stage(Stage.SET_TIME, settings, emit)
    emit(Finished())