"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from facebox import __version__
from facebox.api.routes import router
from facebox.config import Settings, get_settings
from facebox.ml.face_detector import PlaceholderFaceDetector
from facebox.workers import WorkerPool

logger = logging.getLogger(__name__)


def init_app_state(app: FastAPI, settings: Settings) -> None:
    """Attach settings, detector and worker pool to ``app.state``."""
    app.state.settings = settings
    app.state.face_detector = PlaceholderFaceDetector(
        min_dimension=settings.min_face_dimension,
        confidence_threshold=settings.confidence_threshold,
    )
    app.state.worker_pool = WorkerPool.from_settings(settings)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting facebox %s (max_concurrent=%s, max_queue_depth=%s, output=%s)",
        __version__,
        settings.max_concurrent,
        settings.max_queue_depth,
        settings.output_format,
    )

    init_app_state(app, settings)

    logger.info("facebox ready (detector=%s)", app.state.face_detector.model_name)
    yield

    logger.info("Shutting down facebox")
    app.state.worker_pool.shutdown()
    logger.info("facebox shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="facebox",
        description="Face region annotation, cropping and data-URI transport",
        version=__version__,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    settings = get_settings()
    uvicorn.run("facebox.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
