"""
FastAPI application for the PDF parser service.

Provides endpoints for:
- Health check
- Uploading a PDF and extracting its text and metadata
"""

import logging

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Settings, get_settings
from .middleware import UploadSizeLimitMiddleware
from .models import HealthResponse
from .routers import upload
from .services.pdf_service import get_pdf_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info("Starting PDF Parser API...")
    get_pdf_service()
    logger.info("Services initialized successfully")
    yield
    logger.info("Shutting down PDF Parser API...")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration to use. Defaults to the cached environment settings.

    Returns:
        FastAPI: Application with CORS, the upload size limit and all routes wired.
    """
    settings = settings or get_settings()
    logging.getLogger().setLevel(settings.log_level)

    application = FastAPI(
        title="PDF Parser API",
        description="Extract text and metadata from uploaded PDF files",
        version=__version__,
        lifespan=lifespan,
    )
    application.state.settings = settings

    # Configure CORS for the allowed frontends
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Added last so it runs first, before any body is read
    application.add_middleware(
        UploadSizeLimitMiddleware,
        max_bytes=settings.max_upload_bytes,
    )

    # =========================================================================
    # Health Endpoints
    # =========================================================================

    @application.get("/", response_model=HealthResponse)
    async def root() -> HealthResponse:
        """Root endpoint - health check."""
        return HealthResponse(message="PDF Parser API is running")

    application.include_router(upload.router)

    logger.debug(
        "Application created (origins=%s, max_upload_bytes=%d)",
        settings.cors_origins,
        settings.max_upload_bytes,
    )
    return application


app = create_app()
