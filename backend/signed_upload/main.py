"""
FastAPI application entry point.
Sets up the API with lifespan events for storage initialization.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from signed_upload import __version__
from signed_upload.api.router import api_router
from signed_upload.config import settings
from signed_upload.middleware.metrics_middleware import MetricsMiddleware
from signed_upload.storage.factory import close_storage, init_storage
from signed_upload.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup/shutdown events.
    - Startup: Load credentials and build the storage client
    - Shutdown: Close the storage client
    """
    configure_logging(settings.service_name, settings.log_level)
    
    # Never fails startup: without credentials the app still serves
    # /health and /metrics, and /upload answers 503.
    app.state.storage = init_storage(settings)
    if not app.state.storage.is_configured:
        logger.warning(f"Starting without storage: {app.state.storage.error}")
    
    yield
    
    close_storage(app.state.storage)


# Create FastAPI app
app = FastAPI(
    title="Signed Upload API",
    description="Uploads files to object storage and returns time-limited signed URLs",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(MetricsMiddleware)

app.include_router(api_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Signed Upload API",
        "version": __version__,
        "environment": settings.environment
    }


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )
