"""Waitlist listings for veterans awaiting a flight and unpaired guardians."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from honorflight.models.participants import Guardian, Veteran
from honorflight.store.documents import ViewQuery

from .view_aggregator import group_waitlist_names

if TYPE_CHECKING:
    from honorflight.store.client import RequestContext
    from honorflight.store.documents import DocumentStore

WAITLIST_VIEWS = {
    "veterans": "waitlist_veterans",
    "guardians": "waitlist_guardians",
}
VETERAN_GROUPS_VIEW = "waitlist_veteran_groups"
DEFAULT_PAGE_SIZE = 20


@dataclass
class WaitlistPage:
    """Pagination for a waitlist listing; invalid values fall back to defaults."""

    type: str
    offset: int = 0
    limit: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.offset < 0:
            self.offset = 0
        if self.limit < 1:
            self.limit = DEFAULT_PAGE_SIZE

    def validate(self) -> None:
        if not self.type:
            raise ValueError("type parameter is required")
        if self.type not in WAITLIST_VIEWS:
            raise ValueError('type must be either "veterans" or "guardians"')

    @property
    def view_name(self) -> str:
        return WAITLIST_VIEWS[self.type]

    def to_query(self) -> ViewQuery:
        return ViewQuery(limit=self.limit, skip=self.offset or None, include_docs=True)


class WaitlistService:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def list_waitlist(self, ctx: RequestContext, page: WaitlistPage) -> list[dict[str, Any]]:
        """Return one page of the waitlist in view order, as normalized documents."""
        page.validate()
        rows = await self.store.query_view(ctx, page.view_name, page.to_query())
        model = Veteran if page.type == "veterans" else Guardian
        return [model.from_document(row.doc).to_document() for row in rows if row.doc]

    async def list_veteran_groups(self, ctx: RequestContext) -> list[dict[str, Any]]:
        rows = await self.store.query_view(ctx, VETERAN_GROUPS_VIEW, ViewQuery())
        return group_waitlist_names(rows)
