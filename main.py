"""Main entry point for the calendar engine FastAPI application.

This module creates and configures the FastAPI app instance that serves the
REST API over the in-memory calendar engine.

To run the development server:
    uvicorn main:app --reload

Configuration is read from the environment (and a ``.env`` file) at startup;
see ``models.settings.EngineSettings.from_env``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError

from api.dependencies import initialize_coordinator, shutdown_coordinator
from api.exceptions import (
    calendar_error_handler,
    generic_exception_handler,
    runtime_error_handler,
    validation_exception_handler,
)
from api.routes import calendars as calendar_routes
from api.routes import copy as copy_routes
from api.routes import events as event_routes
from api.routes import series as series_routes
from models.errors import CalendarError
from models.settings import EngineSettings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events.

    Loads settings, configures logging and creates the shared coordinator at
    startup; drops it at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    settings = EngineSettings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"Starting calendar engine (default timezone {settings.default_timezone})")
    initialize_coordinator(settings)

    yield  # App runs and handles requests here

    logger.info("Shutting down calendar engine")
    shutdown_coordinator()


# Create the FastAPI application instance
app = FastAPI(
    title="Calendar Engine",
    description="API for multi-calendar event storage, recurring series and timezone-aware copies",
    version="0.1.0",
    lifespan=lifespan,
)

# Register exception handlers
# Order matters: specific exceptions before general ones
app.add_exception_handler(CalendarError, calendar_error_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(RuntimeError, runtime_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Register route modules
app.include_router(calendar_routes.router)
app.include_router(event_routes.router)
app.include_router(series_routes.router)
app.include_router(copy_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message.

    Returns:
        A dictionary with a welcome message.
    """
    return {
        "message": "Welcome to the Calendar Engine API",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring.

    Returns:
        A dictionary indicating the service is healthy.
    """
    return {"status": "healthy"}
