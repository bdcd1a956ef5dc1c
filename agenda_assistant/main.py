"""Main FastAPI application module for Agenda Assistant.

This module creates the FastAPI application, builds the application context
at startup and mounts the routers.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from agenda_assistant.core.config import Settings, get_settings
from agenda_assistant.core.dependencies import build_context
from agenda_assistant.core.logging_config import build_logging_config, configure_logging
from agenda_assistant.api.routers import auth_google, items, session as session_router, ui

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Builds the FastAPI app. Settings are read from the environment unless given."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Agenda Assistant API...")
        current_settings = settings or get_settings()
        context = build_context(current_settings)
        app.state.context = context
        await context.session.initialize()
        logger.info(f"Session ready: {context.session.state.value}")
        yield
        logger.info("Shutting down Agenda Assistant API...")

    app = FastAPI(
        title="Agenda Assistant API",
        description="Extracts calendar events and tasks from free text and adds them to Google Calendar / Tasks.",
        version="0.1.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, replace with specific origins
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(session_router.router, prefix="/api/v1", tags=["Session"])
    app.include_router(items.router, prefix="/api/v1", tags=["Analysis"])
    app.include_router(auth_google.router, tags=["Google Authentication"])
    app.include_router(ui.router, tags=["UI"])

    @app.get("/health", response_model=Dict[str, Any])
    async def health_check(request: Request) -> Dict[str, Any]:
        """Health check endpoint to verify the API is running."""
        context = request.app.state.context
        return {
            "status": "healthy",
            "version": app.version,
            "environment": context.settings.environment,
            "mode": "demo" if context.demo_mode else "live",
            "session": context.session.state.value,
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting Uvicorn server on {settings.api_host}:{settings.api_port} with reload={settings.api_reload}")
    uvicorn.run(
        "agenda_assistant.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_config=build_logging_config(settings.log_level),
        log_level=settings.api_log_level.lower()
    )
