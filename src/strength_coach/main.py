"""FastAPI application for the Strength Coach service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.exception_handlers import register_exception_handlers
from .api.routes import analysis, cycles, suggestions
from .config import get_settings
from .utils.log_sanitizer import install_log_sanitizer
from .utils.logging_config import configure_logging

# Scrub secrets from every record before any handler sees it
install_log_sanitizer()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(f"Starting Strength Coach v{__version__}")
    logger.info(f"Suggestion cache: {settings.suggestion_cache_path}")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; suggestions will use local fallbacks")
    yield
    logger.info("Shutting down Strength Coach")


app = FastAPI(
    title="Strength Coach API",
    description="Strength progress analysis and pre-workout suggestions",
    version=__version__,
    lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(analysis.router, prefix="/api/v1/analysis", tags=["analysis"])
app.include_router(suggestions.router, prefix="/api/v1/suggestions", tags=["suggestions"])
app.include_router(cycles.router, prefix="/api/v1/cycles", tags=["cycles"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Strength Coach API",
        "version": __version__,
        "status": "healthy",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
