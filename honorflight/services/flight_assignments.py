"""Flight assignment read service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from honorflight.models.flight_assignment import FlightAssignment, FlightSummary
from honorflight.models.flight_detail import FlightDetail
from honorflight.models.participants import FLIGHT_TYPE
from honorflight.store.documents import ViewQuery

from .view_aggregator import build_detail_pairs, build_pairs, calculate_bus_stats, calculate_counts, sort_pairs

if TYPE_CHECKING:
    from honorflight.store.client import RequestContext
    from honorflight.store.documents import DocumentStore, ViewRow

logger = logging.getLogger(__name__)

FLIGHT_ASSIGNMENT_VIEW = "flight_assignment"
FLIGHT_PAIRINGS_VIEW = "flight_pairings"
# High code point closes the key range over every [flightName, ...] key
VIEW_KEY_HIGH = "\ufff0"


class FlightAssignmentService:
    """Read views of one flight: the assignment roster and the seat/bus detail."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def get_assignments(self, ctx: RequestContext, flight_id: str) -> FlightAssignment:
        """Load a flight and its pairs.

        Raises:
            DocumentNotFoundError: flight does not exist
            WrongDocumentKindError: id names a document that is not a flight
        """
        summary = await self._load_flight(ctx, flight_id)
        rows = await self._flight_rows(ctx, FLIGHT_ASSIGNMENT_VIEW, summary)

        pairs = sort_pairs(build_pairs(rows))
        counts = calculate_counts(pairs, summary.capacity)
        logger.debug(
            f"Flight {summary.name}: {len(pairs)} pairs, {counts.veterans} veterans, "
            f"{counts.guardians} guardians, {counts.remaining} seats remaining"
        )
        return FlightAssignment(flight=summary, counts=counts, pairs=pairs)

    async def get_detail(self, ctx: RequestContext, flight_id: str) -> FlightDetail:
        """Load a flight with people grouped by guardian and per-bus statistics.

        Raises:
            DocumentNotFoundError: flight does not exist
            WrongDocumentKindError: id names a document that is not a flight
        """
        summary = await self._load_flight(ctx, flight_id)
        rows = await self._flight_rows(ctx, FLIGHT_PAIRINGS_VIEW, summary)

        pairs = build_detail_pairs(rows)
        stats = calculate_bus_stats(pairs)
        mismatched = sum(1 for pair in pairs if pair.bus_mismatch)
        if mismatched:
            logger.debug(f"Flight {summary.name}: {mismatched} groups split across buses")
        return FlightDetail(flight=summary, stats=stats, pairs=pairs)

    async def _load_flight(self, ctx: RequestContext, flight_id: str) -> FlightSummary:
        flight_doc = await self.store.get_typed_document(ctx, flight_id, FLIGHT_TYPE)
        return FlightSummary.from_flight_doc(flight_doc)

    async def _flight_rows(self, ctx: RequestContext, view: str, summary: FlightSummary) -> list[ViewRow]:
        return await self.store.query_view(
            ctx,
            view,
            ViewQuery(startkey=[summary.name], endkey=[summary.name + VIEW_KEY_HIGH]),
        )
