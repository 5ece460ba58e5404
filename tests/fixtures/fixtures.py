"""
Common test fixtures: an in-memory document store and document factories.

FakeDocumentStore implements the DocumentStore interface the services use,
records every call, and can be told to fail specific operations.
"""

from __future__ import annotations

import copy
from typing import Any

from honorflight.store.documents import ViewQuery, ViewRow
from honorflight.store.errors import (
    DocumentConflictError,
    DocumentNotFoundError,
    WrongDocumentKindError,
)


def store_id(n: int) -> str:
    """A 32-character id shaped like a CouchDB UUID."""
    return f"{n:032x}"


def make_flight_doc(flight_id: str = "flight-1", name: str = "SSHF-Test01", capacity: int = 100) -> dict[str, Any]:
    return {
        "_id": flight_id,
        "_rev": "1-flight",
        "type": "Flight",
        "name": name,
        "capacity": capacity,
        "flight_date": "2026-05-02",
    }


def make_veteran_doc(
    veteran_id: str,
    first: str = "Vet",
    last: str = "Eran",
    flight_id: str = "",
    group: str = "",
    guardian_id: str = "",
    guardian_name: str = "",
) -> dict[str, Any]:
    return {
        "_id": veteran_id,
        "_rev": "1-vet",
        "type": "Veteran",
        "name": {"first": first, "last": last},
        "app_date": "2025-01-15",
        "flight": {"id": flight_id, "status": "Active", "group": group, "history": []},
        "guardian": {"id": guardian_id, "name": guardian_name, "history": []},
        "call": {"history": []},
        "metadata": {"created_at": "2025-01-15T10:00:00Z", "created_by": "Intake"},
        "service": {"branch": "Army"},
    }


def make_guardian_doc(
    guardian_id: str,
    first: str = "Guard",
    last: str = "Ian",
    flight_id: str = "None",
    pairings: list[dict[str, str]] | None = None,
) -> dict[str, Any]:
    return {
        "_id": guardian_id,
        "_rev": "1-grd",
        "type": "Guardian",
        "name": {"first": first, "last": last},
        "flight": {"id": flight_id, "status": "Active", "history": []},
        "veteran": {"pref_notes": "", "history": [], "pairings": pairings or []},
        "call": {"history": []},
        "metadata": {"created_at": "2025-02-01T09:00:00Z", "created_by": "Intake"},
    }


def waitlist_row(doc: dict[str, Any] | None, veteran_id: str | None = None, group: str = "") -> ViewRow:
    """A waitlist_veterans_active row: value is the group code."""
    return ViewRow(key=["2025-01-15"], value=group, id=veteran_id or (doc or {}).get("_id"), doc=doc)


def group_row(doc: dict[str, Any], group: str) -> ViewRow:
    """A waitlist_veteran_groups row: key is the group code."""
    return ViewRow(key=group, value=f"{doc['name']['first']} {doc['name']['last']}", id=doc["_id"], doc=doc)


class FakeDocumentStore:
    """In-memory DocumentStore with call tracking and failure injection."""

    def __init__(self, docs: list[dict[str, Any]] | None = None) -> None:
        self.docs: dict[str, dict[str, Any]] = {}
        self.views: dict[str, list[ViewRow]] = {}
        self.get_errors: dict[str, Exception] = {}
        self.put_errors: dict[str, Exception] = {}
        self.view_errors: dict[str, Exception] = {}
        self.get_calls: list[str] = []
        self.put_calls: list[str] = []
        self.view_calls: list[tuple[str, ViewQuery]] = []
        self._revision = 1
        for doc in docs or []:
            self.add(doc)

    def add(self, doc: dict[str, Any]) -> None:
        self.docs[doc["_id"]] = copy.deepcopy(doc)

    def set_view(self, view: str, rows: list[ViewRow]) -> None:
        self.views[view] = rows

    async def get_document(self, ctx: Any, doc_id: str) -> dict[str, Any]:
        self.get_calls.append(doc_id)
        if doc_id in self.get_errors:
            raise self.get_errors[doc_id]
        if doc_id not in self.docs:
            raise DocumentNotFoundError(doc_id)
        return copy.deepcopy(self.docs[doc_id])

    async def get_typed_document(self, ctx: Any, doc_id: str, kind: str) -> dict[str, Any]:
        try:
            doc = await self.get_document(ctx, doc_id)
        except DocumentNotFoundError:
            raise DocumentNotFoundError(doc_id, kind) from None
        if doc.get("type") != kind:
            raise WrongDocumentKindError(doc_id, kind, doc.get("type"))
        return doc

    async def create_document(self, ctx: Any, doc: dict[str, Any]) -> tuple[str, str]:
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", store_id(len(self.docs) + 1000))
        doc["_rev"] = self._next_rev()
        self.docs[doc["_id"]] = doc
        return doc["_id"], doc["_rev"]

    async def replace_document(self, ctx: Any, doc: dict[str, Any]) -> str:
        doc_id = doc["_id"]
        self.put_calls.append(doc_id)
        if doc_id in self.put_errors:
            raise self.put_errors[doc_id]
        stored = self.docs.get(doc_id)
        if stored is not None and stored.get("_rev") != doc.get("_rev"):
            raise DocumentConflictError(409, "Document update conflict.")
        saved = copy.deepcopy(doc)
        saved["_rev"] = self._next_rev()
        self.docs[doc_id] = saved
        return saved["_rev"]

    async def query_view(self, ctx: Any, view: str, query: ViewQuery | None = None) -> list[ViewRow]:
        query = query or ViewQuery()
        self.view_calls.append((view, query))
        if view in self.view_errors:
            raise self.view_errors[view]
        rows = self.views.get(view, [])
        if query.skip:
            rows = rows[query.skip :]
        if query.limit is not None:
            rows = rows[: query.limit]
        return [ViewRow(key=r.key, value=r.value, id=r.id, doc=copy.deepcopy(r.doc)) for r in rows]

    def _next_rev(self) -> str:
        self._revision += 1
        return f"{self._revision}-fake"
