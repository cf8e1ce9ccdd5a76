"""KennelHQ API — FastAPI application entry point.

Run locally:
    uvicorn kennelhq.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kennelhq.config import get_settings
from kennelhq.repro.config_loader import get_repro_config, reload_repro_config
from kennelhq.routers import health, repro

# ---------- Logging ----------

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger("kennelhq")


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting KennelHQ API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    # Fail fast on a broken species table instead of on the first request
    if settings.repro_config_path:
        reload_repro_config(Path(settings.repro_config_path))
    else:
        get_repro_config()
    yield
    logger.info("KennelHQ API shut down")


# ---------- App factory ----------

def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="KennelHQ API",
        description=(
            "Breeding management backend — breeding plan windows, ovulation "
            "pattern learning and heat cycle projection."
        ),
        version=settings.app_version,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(repro.router, prefix=v1_prefix)

    return app


app = create_app()
