# src/tenxr_community/main.py
"""Main entry point for the 10xR community API."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from tenxr_community.api.v1 import (
    chat_router,
    communities_router,
    posts_router,
    users_router,
    votes_router,
)
from tenxr_community.core.exception_handlers import register_exception_handlers
from tenxr_community.core.logging import configure_logging
from tenxr_community.core.settings import settings
from tenxr_community.services.view_cache import get_view_cache

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} API",
    description="Communities, posts, votes and direct messages",
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

register_exception_handlers(app)

# Include API routers
app.include_router(users_router, prefix="/api/v1")
app.include_router(communities_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(votes_router, prefix="/api/v1")
app.include_router(chat_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    # Subscribe the read-side cache before the first mutation can publish.
    get_view_cache()
    logger.info("%s %s started", settings.app_name, settings.app_version)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    get_view_cache().clear()
    logger.info("%s shutting down", settings.app_name)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": f"{settings.app_name} API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("tenxr_community.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
