"""Luna API — FastAPI application entry point.

Run locally:
    uvicorn src.main:app --reload --port 8000
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import Settings, get_settings
from src.menstrual.config_loader import get_cycle_config, reload_cycle_config
from src.middleware.clerk_auth import ClerkAuthMiddleware
from src.middleware.rate_limit import RateLimitMiddleware
from src.middleware.security import SecurityHeadersMiddleware
from src.routers import cycle, health, periods, symptoms
from src.services.database import close_pool, init_pool

logger = logging.getLogger("luna")


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


# ---------- Lifespan ----------

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup / shutdown hooks."""
    settings = get_settings()
    logger.info(
        "Starting Luna API v%s [%s]",
        settings.app_version,
        settings.environment,
    )
    # Fail fast on a broken cycle config rather than on the first request.
    if settings.cycle_config_path:
        reload_cycle_config(settings.cycle_config_path)
    else:
        get_cycle_config()
    await init_pool(settings)
    yield
    await close_pool()
    logger.info("Luna API shut down")


# ---------- App factory ----------

def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Luna API",
        description="Menstrual cycle tracking: period and symptom logs, "
        "cycle predictions, fertility window and daily insights.",
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ---------- Middleware (last added runs first) ----------

    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RateLimitMiddleware, settings=settings)
    app.add_middleware(ClerkAuthMiddleware, settings=settings)

    # CORS is added last so it answers preflight before auth runs
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "Retry-After"],
    )

    # ---------- Health check (outside v1 prefix, always at /health) ----------
    app.include_router(health.router)

    # ---------- API v1 routes ----------
    v1_prefix = "/api/v1"

    app.include_router(periods.router, prefix=v1_prefix)
    app.include_router(symptoms.router, prefix=v1_prefix)
    app.include_router(cycle.router, prefix=v1_prefix)

    return app


app = create_app()
