"""
Shared dependencies for the Honor Flight API.

This module provides:
- The process-wide CouchDB session cache
- Document store lifecycle (one httpx client per process)
- Per-request session bootstrap (RequestContext)
- Service factories for the routers
"""

from __future__ import annotations

import logging

import httpx
from fastapi import Depends

from honorflight.services import (
    FlightAssignmentService,
    GuardianUpdateService,
    WaitlistAllocator,
    WaitlistService,
)
from honorflight.store import DocumentStore, RequestContext, SessionCache, StoreClient

from .settings import get_settings

logger = logging.getLogger(__name__)

# ========================================
# CouchDB Session Cache
# ========================================

# One cached session per (server, account) for the whole process. Concurrent
# requests may refresh it at the same time; the last write wins.
_settings = get_settings()
session_cache = SessionCache(ttl_seconds=_settings.db_session_ttl_seconds)


# ========================================
# Document Store
# ========================================


class StoreState:
    """Holds the document store for the application lifetime."""

    store: DocumentStore | None = None


store_state = StoreState()


def init_document_store(http_client: httpx.AsyncClient | None = None) -> DocumentStore:
    """Create the shared document store (idempotent)."""
    if store_state.store is None:
        settings = get_settings()
        client = StoreClient(settings.store_config(), session_cache, http_client)
        store_state.store = DocumentStore(client)
        logger.info(f"Document store configured for {settings.db_url}/{settings.db_name}")
    return store_state.store


async def close_document_store() -> None:
    if store_state.store is not None:
        await store_state.store.client.aclose()
        store_state.store = None


def get_document_store() -> DocumentStore:
    """FastAPI dependency to get the shared document store."""
    return init_document_store()


async def get_request_context(store: DocumentStore = Depends(get_document_store)) -> RequestContext:
    """Open (or reuse) a CouchDB session for this request.

    Raises StoreSessionError when no session can be obtained; the app maps
    that to 503.
    """
    context = RequestContext()
    await store.client.ensure_session(context)
    return context


# ========================================
# Services
# ========================================


def get_flight_assignment_service(store: DocumentStore = Depends(get_document_store)) -> FlightAssignmentService:
    return FlightAssignmentService(store)


def get_waitlist_allocator(store: DocumentStore = Depends(get_document_store)) -> WaitlistAllocator:
    return WaitlistAllocator(store)


def get_guardian_update_service(store: DocumentStore = Depends(get_document_store)) -> GuardianUpdateService:
    return GuardianUpdateService(store)


def get_waitlist_service(store: DocumentStore = Depends(get_document_store)) -> WaitlistService:
    return WaitlistService(store)


__all__ = [
    "session_cache",
    "store_state",
    "init_document_store",
    "close_document_store",
    "get_document_store",
    "get_request_context",
    "get_flight_assignment_service",
    "get_waitlist_allocator",
    "get_guardian_update_service",
    "get_waitlist_service",
]
