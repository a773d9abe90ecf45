"""Application factory that wires the directory API and the prompt gateway."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI

from .api import create_app as create_api_app
from .config import Settings, load_settings
from .database import Database
from .prompts import PromptGateway, create_prompt_gateway

logger = logging.getLogger("userhub.application")


def create_application(
    *,
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    gateway: Optional[PromptGateway] = None,
) -> FastAPI:
    """Create the combined ASGI application."""

    if settings is None:
        settings = load_settings()

    if database is None:
        database = Database(settings.database_path)
    database.initialize()

    if gateway is None and settings.llm.enabled:
        gateway = create_prompt_gateway(settings.llm)
    if gateway is None:
        logger.info("No Anthropic API key configured; /api/prompt is disabled")

    api_app = create_api_app(
        database=database,
        gateway=gateway,
        cors_origins=settings.cors_origins,
    )

    app = FastAPI(
        title="UserHub",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.database = database
    app.state.api = api_app

    app.mount("/api", api_app)

    return app


__all__ = ["create_application"]
