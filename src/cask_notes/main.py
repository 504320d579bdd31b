# src/cask_notes/main.py
"""Main entry point for the Cask Notes application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from cask_notes.api.v1 import auth_router, content_router, posts_router
from cask_notes.core.errors import CaskNotesError
from cask_notes.core.settings import settings
from cask_notes.core.signer import get_operation_signer

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Cask Notes API",
    description="Whisky community posts with member and password-protected anonymous authors",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(content_router, prefix="/api/v1")


@app.exception_handler(CaskNotesError)
async def handle_domain_error(request: Request, exc: CaskNotesError) -> JSONResponse:
    """Turn recoverable domain errors into structured responses."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.on_event("startup")
async def on_startup() -> None:
    # A missing or placeholder signing secret must stop the process here,
    # not on the first anonymous edit.
    get_operation_signer()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "Cask Notes API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cask_notes.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
