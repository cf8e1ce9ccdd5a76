"""Shared FastAPI dependencies injected into route handlers."""

from __future__ import annotations

from datetime import date
from typing import Annotated

from fastapi import Depends

from kennelhq.config import Settings, get_settings
from kennelhq.repro.config_loader import ReproConfig, get_repro_config


def get_today() -> date:
    """The calendar day requests are evaluated against.

    This is the only place the service reads the clock; the engine itself
    always receives ``today`` as an argument.  Tests override it.
    """
    return date.today()


# Annotated shortcuts for route signatures
AppSettings = Annotated[Settings, Depends(get_settings)]
Today = Annotated[date, Depends(get_today)]
EngineConfig = Annotated[ReproConfig, Depends(get_repro_config)]
