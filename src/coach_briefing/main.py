"""FastAPI application for the Coach Briefing service."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api.exception_handlers import register_exception_handlers
from .api.routes import briefing, upgrade
from .config import get_settings
from .utils.log_sanitizer import install_log_sanitizer


# Must run before any logging occurs
install_log_sanitizer()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=logging.DEBUG if settings.debug else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    # Handlers exist now; filter what they emit.
    install_log_sanitizer()
    logger.info(f"Starting Coach Briefing API v{__version__}")
    logger.info(f"Key-value store: {settings.store_db_path}")
    yield
    logger.info("Shutting down Coach Briefing API")


app = FastAPI(
    title="Coach Briefing API",
    description="Dashboard briefing selection and upgrade prompt throttling",
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

app.include_router(briefing.router, prefix="/api/v1/briefing", tags=["briefing"])
app.include_router(upgrade.router, prefix="/api/v1/upgrade", tags=["upgrade"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Coach Briefing API",
        "version": __version__,
        "status": "healthy",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
