"""Document and view access on top of the resilient store client.

This module isolates every CouchDB URL and response shape so the services
can be tested against an in-memory fake with the same interface.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import httpx

from .client import RequestContext, StoreClient
from .errors import DocumentConflictError, DocumentNotFoundError, StoreRequestError, WrongDocumentKindError

logger = logging.getLogger(__name__)


@dataclass
class ViewRow:
    """One row of a secondary-index query."""

    key: Any = None
    value: Any = None
    id: str | None = None
    doc: dict[str, Any] | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ViewRow:
        return cls(key=data.get("key"), value=data.get("value"), id=data.get("id"), doc=data.get("doc"))


@dataclass
class ViewQuery:
    """Parameters for a view query; keys are JSON-encoded as CouchDB expects."""

    key: Any = None
    startkey: Any = None
    endkey: Any = None
    limit: int | None = None
    skip: int | None = None
    descending: bool = False
    include_docs: bool = False
    extra: dict[str, str] = field(default_factory=dict)

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {"descending": "true" if self.descending else "false"}
        if self.key is not None:
            params["key"] = json.dumps(self.key)
        if self.startkey is not None:
            params["startkey"] = json.dumps(self.startkey)
        if self.endkey is not None:
            params["endkey"] = json.dumps(self.endkey)
        if self.limit is not None:
            params["limit"] = str(self.limit)
        if self.skip:
            params["skip"] = str(self.skip)
        if self.include_docs:
            params["include_docs"] = "true"
        params.update(self.extra)
        return params


def _reason(response: httpx.Response, default: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return default
    if isinstance(data, dict):
        return str(data.get("reason") or data.get("error") or default)
    return default


class DocumentStore:
    """Persistence and secondary-index API for participant documents."""

    def __init__(self, client: StoreClient) -> None:
        self.client = client

    @property
    def database_url(self) -> str:
        return self.client.config.database_url

    def _doc_url(self, doc_id: str) -> str:
        return f"{self.database_url}/{quote(doc_id, safe='')}"

    async def get_document(self, ctx: RequestContext, doc_id: str) -> dict[str, Any]:
        """Fetch one document. Raises DocumentNotFoundError on 404."""
        response = await self.client.request(ctx, "GET", self._doc_url(doc_id))
        if response.status_code == 404:
            raise DocumentNotFoundError(doc_id)
        if not response.is_success:
            raise StoreRequestError(response.status_code, _reason(response, f"Failed to get document {doc_id}"))
        data: dict[str, Any] = response.json()
        return data

    async def get_typed_document(self, ctx: RequestContext, doc_id: str, kind: str) -> dict[str, Any]:
        """Fetch a document and verify its ``type`` field.

        Raises:
            DocumentNotFoundError: if the document is absent (kind named in the message)
            WrongDocumentKindError: if the document's type differs from ``kind``
        """
        try:
            data = await self.get_document(ctx, doc_id)
        except DocumentNotFoundError:
            raise DocumentNotFoundError(doc_id, kind) from None
        if data.get("type") != kind:
            raise WrongDocumentKindError(doc_id, kind, data.get("type"))
        return data

    async def create_document(self, ctx: RequestContext, doc: dict[str, Any]) -> tuple[str, str]:
        body = {k: v for k, v in doc.items() if k not in ("_id", "_rev") or v}
        response = await self.client.request(
            ctx,
            "POST",
            self.database_url,
            headers={"Content-Type": "application/json"},
            content=json.dumps(body),
        )
        if not response.is_success:
            raise StoreRequestError(response.status_code, _reason(response, "Failed to create document"))
        data = response.json()
        return data["id"], data["rev"]

    async def replace_document(self, ctx: RequestContext, doc: dict[str, Any]) -> str:
        """Write a full document by id, returning the new revision.

        The document's ``_rev`` must match the stored one; a stale revision
        raises DocumentConflictError.
        """
        doc_id = doc["_id"]
        response = await self.client.request(
            ctx,
            "PUT",
            self._doc_url(doc_id),
            headers={"Content-Type": "application/json"},
            content=json.dumps(doc),
        )
        if response.status_code == 409:
            raise DocumentConflictError(409, _reason(response, "Document update conflict."))
        if not response.is_success:
            raise StoreRequestError(response.status_code, _reason(response, "Unknown error"))
        rev: str = response.json()["rev"]
        return rev

    async def query_view(self, ctx: RequestContext, view: str, query: ViewQuery | None = None) -> list[ViewRow]:
        """Query a view of the application design document."""
        query = query or ViewQuery()
        url = f"{self.database_url}/_design/{self.client.config.design_doc}/_view/{view}"
        response = await self.client.request(ctx, "GET", url, params=query.to_params())
        if not response.is_success:
            raise StoreRequestError(response.status_code, _reason(response, f"Failed to query view {view}"))
        rows = response.json().get("rows") or []
        logger.debug(f"View {view} returned {len(rows)} rows")
        return [ViewRow.from_json(row) for row in rows]
