"""
Enrollment Web - FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from enrollment import __version__
from enrollment.config import configure_logging, get_csrf_secret, settings
from enrollment.web.routes import router as onboarding_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log configuration on startup."""
    configure_logging()
    logger.info("Enrollment starting up...")
    get_csrf_secret()  # fails fast in production without CSRF_SECRET
    logger.info(f"  Environment: {settings.enrollment_env}")
    logger.info(f"  Storage backend: {settings.storage_backend}")
    logger.info(f"  Address line 2 required: {settings.address_line2_required}")
    yield


app = FastAPI(title="Enrollment", version=__version__, lifespan=lifespan)

app.include_router(onboarding_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
