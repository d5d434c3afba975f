"""
Lab Report Triage - Main FastAPI Application.

Routes are organized in modular files under backend/api/:
- upload.py: Lab report upload and triage
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.core.config import get_settings
from backend.api.upload import get_pipeline, router as upload_router

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.app.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Lab Report Triage",
    description="Extracts lab values from report images/PDFs and flags life-threatening deviations",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.app.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


# =============================================================================
# Include Routers
# =============================================================================

app.include_router(upload_router, prefix="/api")


@app.get("/")
def root():
    return {"message": "Welcome to the Lab Report Triage API"}


@app.on_event("shutdown")
def on_shutdown():
    """Release the pipeline's relay workers if a request ever built it."""
    if get_pipeline.cache_info().currsize:
        get_pipeline().close()


# =============================================================================
# Health Check
# =============================================================================

@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}
