"""Health check endpoint — public, no auth required."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from kennelhq.config import get_settings
from kennelhq.repro.config_loader import ConfigValidationError, get_repro_config

router = APIRouter(tags=["system"])
logger = logging.getLogger("kennelhq.health")


@router.get("/health")
async def health_check() -> dict:
    """Liveness probe. Returns 200 if the API process is up.

    Also reports whether the repro engine config is loaded and valid.
    """
    settings = get_settings()
    config_version = None
    try:
        config_version = get_repro_config().version
    except (ConfigValidationError, FileNotFoundError) as exc:
        logger.warning("Health check config probe failed: %s", exc)

    return {
        "status": "healthy" if config_version else "degraded",
        "version": settings.app_version,
        "environment": settings.environment,
        "repro_config": config_version or "invalid",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
