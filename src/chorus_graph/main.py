# src/chorus_graph/main.py
"""Main entry point for the Chorus Graph service."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from chorus_graph import __version__
from chorus_graph.api.errors import register_exception_handlers
from chorus_graph.api.v1 import (
    communities_router,
    connections_router,
    invitations_router,
    join_requests_router,
    posts_router,
)
from chorus_graph.core.settings import settings
from chorus_graph.schemas.common import ERROR_RESPONSES

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Connections, communities and content visibility",
    version=__version__,
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
app.include_router(connections_router, prefix="/api/v1", responses=ERROR_RESPONSES)
app.include_router(communities_router, prefix="/api/v1", responses=ERROR_RESPONSES)
app.include_router(join_requests_router, prefix="/api/v1", responses=ERROR_RESPONSES)
app.include_router(invitations_router, prefix="/api/v1", responses=ERROR_RESPONSES)
app.include_router(posts_router, prefix="/api/v1", responses=ERROR_RESPONSES)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chorus_graph.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
