"""Scaffold AI API - FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ScaffoldError -> {"error", "code", "details"} JSON responses
    - CORS configured from settings (not hardcoded)
    - Logging configured on startup via lifespan context manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scaffold_ai.api.error_handlers import register_error_handlers
from scaffold_ai.api.routes import (
    diagnostics,
    execute_workflow,
    generate_workflow,
    health,
    templates,
)
from scaffold_ai.config import get_settings
from scaffold_ai.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger.info("Scaffold AI API started")
    yield
    logger.info("Scaffold AI API shutting down")


app = FastAPI(
    title="Scaffold AI API", version="0.1.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(execute_workflow.router)
app.include_router(generate_workflow.router)
app.include_router(templates.router)
app.include_router(diagnostics.router)

register_error_handlers(app)
