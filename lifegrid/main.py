"""
lifegrid - Conway's Game of Life server
FastAPI application entry point
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from lifegrid import __version__
from lifegrid.config.infra_settings import get_infra_settings
from lifegrid.config.omegaconf_settings import get_settings_store
from lifegrid.middleware import setup_middleware
from lifegrid.routers import health, universe
from lifegrid.routers import settings as settings_api
from lifegrid.services.universe_manager import (
    init_universe_manager,
    shutdown_universe_manager,
)

settings = get_infra_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Bind the YAML settings store to the configured directory before anything reads it
get_settings_store(settings.CONFIG_DIR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("lifegrid starting up...")
    logger.info(f"Environment: {settings.ENV_NAME}")

    settings_store = get_settings_store()
    await settings_store.load_config()
    logger.info(f"✓ Settings loaded from {settings_store.config_dir}")

    manager = await init_universe_manager(settings_store)
    frame = await manager.snapshot()
    logger.info(
        f"✓ Universe initialized ({frame.width}x{frame.height}, "
        f"population {frame.population}, running={frame.running})"
    )

    yield

    await shutdown_universe_manager()
    logger.info("lifegrid shutting down...")


# Create FastAPI app
app = FastAPI(
    title="lifegrid API",
    description="Conway's Game of Life",
    version=__version__,
    lifespan=lifespan
)

# Set up middleware (CORS, request logging, exception handlers)
setup_middleware(app)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(universe.router, prefix="/api/universe", tags=["universe"])
app.include_router(settings_api.router, prefix="/api/settings", tags=["settings"])


@app.get("/api")
async def api_root():
    """API banner."""
    return {
        "name": "lifegrid API",
        "version": __version__,
        "status": "running"
    }


# The frontend owns "/" when it is present; mount last so API routes win
if settings.WWW_DIR.is_dir():
    app.mount("/", StaticFiles(directory=settings.WWW_DIR, html=True), name="www")
    logger.info(f"Serving frontend from {settings.WWW_DIR}")
else:
    logger.warning(f"Frontend directory not found: {settings.WWW_DIR}")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return await api_root()
