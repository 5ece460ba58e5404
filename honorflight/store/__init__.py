"""
Document store access: session cache, resilient client, and document/view API.
"""

from __future__ import annotations

from .client import RequestContext, StoreClient, StoreConfig
from .documents import DocumentStore, ViewQuery, ViewRow
from .errors import (
    DocumentConflictError,
    DocumentNotFoundError,
    StoreError,
    StoreRequestError,
    StoreSessionError,
    ValidationFailedError,
    WrongDocumentKindError,
)
from .session_cache import SessionCache, SessionEntry

__all__ = [
    "DocumentConflictError",
    "DocumentNotFoundError",
    "DocumentStore",
    "RequestContext",
    "SessionCache",
    "SessionEntry",
    "StoreClient",
    "StoreConfig",
    "StoreError",
    "StoreRequestError",
    "StoreSessionError",
    "ValidationFailedError",
    "ViewQuery",
    "ViewRow",
    "WrongDocumentKindError",
]
