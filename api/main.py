#!/usr/bin/env python3
"""
Honor Flight API - HTTP API layer for the flight allocation core.

This is the FastAPI application in front of the CouchDB-backed core. It
serves:
- Flight assignment rosters and waitlist allocation
- Guardian updates with pairing synchronization
- Waitlist listings
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from honorflight.auth_middleware import AuthMiddleware, AuthUser, get_current_user
from honorflight.logging_config import configure_logging, get_logger
from honorflight.store.errors import (
    DocumentConflictError,
    DocumentNotFoundError,
    StoreError,
    StoreRequestError,
    StoreSessionError,
    ValidationFailedError,
    WrongDocumentKindError,
)

from .dependencies import close_document_store, init_document_store
from .settings import get_settings

# Configure unified logging format
# Format: 2026-01-06T14:05:52Z [api] LEVEL message
configure_logging(source="api")
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle - startup and shutdown."""
    # Startup: one connection pool for every store call in this process
    init_document_store(httpx.AsyncClient(timeout=30.0))

    yield

    # Shutdown
    await close_document_store()


def status_for_store_error(exc: StoreError) -> int:
    """HTTP status for a store-layer failure."""
    if isinstance(exc, StoreSessionError):
        return 503
    if isinstance(exc, DocumentNotFoundError):
        return 404
    if isinstance(exc, (WrongDocumentKindError, ValidationFailedError)):
        return 400
    if isinstance(exc, DocumentConflictError):
        return 409
    if isinstance(exc, StoreRequestError):
        return 500
    return 500


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(title="Honor Flight API", description="Honor Flight flight allocation API", lifespan=lifespan)

    # Add exception handlers
    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
        status_code = status_for_store_error(exc)
        if status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=status_code, content={"error": str(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    # Load settings
    settings = get_settings()

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    # Add authentication middleware (runs after CORS due to reverse order)
    app.add_middleware(
        AuthMiddleware,
        auth_mode=settings.get_effective_auth_mode(),
        client_id=settings.oidc_client_id,
        issuer=settings.oidc_issuer,
    )

    # Register routers
    from .routers import flight_assignments, guardians, waitlist

    app.include_router(flight_assignments.router)
    app.include_router(guardians.router)
    app.include_router(waitlist.router)

    # Core endpoints (not in a router)
    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/user/me")
    async def get_current_user_info(user: AuthUser = Depends(get_current_user)) -> dict[str, Any]:
        """Get current user information."""
        return user.to_dict()

    return app


# Create app instance for uvicorn
app = create_app()

if __name__ == "__main__":
    import uvicorn

    # log_config=None keeps the handlers installed by configure_logging
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, log_config=None)
