"""
ParentGuidance Backend - Main Application

FastAPI service that structures parenting guidance produced by Claude.
"""
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI

from parentguidance import __version__
from parentguidance.config import settings
from parentguidance.logging_config import get_logger, init_logging
from parentguidance.routers.guidance import router as guidance_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("startup", version=__version__)
    yield
    logger.info("shutdown")


def create_app() -> FastAPI:
    init_logging()

    # --- Sentry ---
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            traces_sample_rate=0.1,
            environment="development" if settings.DEBUG else "production",
        )
        logger.info("sentry_initialized")

    app = FastAPI(
        title="ParentGuidance Backend",
        version=__version__,
        lifespan=lifespan,
    )

    # --- Health check ---
    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    app.include_router(guidance_router)
    return app


app = create_app()
