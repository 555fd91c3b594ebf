"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from delve import __version__
from delve.api.dependencies import set_registry
from delve.api.registry import EpisodeRegistry
from delve.api.routes import api_router
from delve.config import SimulationConfig
from delve.core.errors import ConfigurationError
from delve.utils.logging import setup_logging

logger = logging.getLogger(__name__)


async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


def create_app(config: SimulationConfig | None = None) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if config is None:
        config = SimulationConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        registry = EpisodeRegistry(_config)
        set_registry(registry)
        logger.info("API server started: accepting episodes.")
        yield
        registry.clear()
        set_registry(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Delve Episode Server",
        description=(
            "Deterministic turn-based dungeon simulation, one decision point per step.\n\n"
            "## API Groups\n\n"
            "- **Episodes**: Create episodes, step them, read observations and replay logs\n"
            "- **Actions**: The canonical 11-action space\n"
            "- **Config**: Read-only engine configuration\n"
        ),
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Episodes", "description": "Episode lifecycle: create, step, inspect, replay, delete."},
            {"name": "Actions", "description": "Canonical action names accepted by the step endpoint."},
            {"name": "Config", "description": "Engine tunables, hero classes and challenge bits."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ConfigurationError, _configuration_error)

    app.include_router(api_router)
    return app
