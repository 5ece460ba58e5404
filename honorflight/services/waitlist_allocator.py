"""Promote waitlisted veterans, their groups, and their guardians onto a flight.

Items are written one at a time and never rolled back. A failure on one
veteran or guardian becomes an entry in ``AllocationResult.errors`` and the
batch carries on; only a lost database session aborts the run.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from honorflight.models.history import utc_timestamp
from honorflight.models.participants import FLIGHT_TYPE, NO_FLIGHT, Guardian, Veteran
from honorflight.models.results import AllocationResult
from honorflight.store.documents import ViewQuery, ViewRow
from honorflight.store.errors import StoreError, StoreRequestError, StoreSessionError

if TYPE_CHECKING:
    from honorflight.store.client import RequestContext
    from honorflight.store.documents import DocumentStore

logger = logging.getLogger(__name__)

WAITLIST_ACTIVE_VIEW = "waitlist_veterans_active"
VETERAN_GROUPS_VIEW = "waitlist_veteran_groups"

MIN_VETERAN_COUNT = 1
MAX_VETERAN_COUNT = 100

# Guardian ids are 32-char store UUIDs; anything else is a placeholder.
GUARDIAN_ID_LENGTH = 32


def is_unflighted(flight_id: str | None) -> bool:
    return not flight_id or flight_id == NO_FLIGHT


class WaitlistAllocator:
    """Moves veterans from the active waitlist onto a flight."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def allocate(
        self,
        ctx: RequestContext,
        flight_id: str,
        requested_count: int,
        user_name: str,
    ) -> AllocationResult:
        """Add up to ``requested_count`` waitlisted veterans (plus groups and guardians).

        Group closure can grow the batch past ``requested_count``.

        Raises:
            ValueError: requested_count outside 1..100
            DocumentNotFoundError: flight does not exist
            WrongDocumentKindError: flight_id names a non-flight document
            StoreSessionError: database session lost; never absorbed per item
        """
        if not MIN_VETERAN_COUNT <= requested_count <= MAX_VETERAN_COUNT:
            raise ValueError(f"veteranCount must be between {MIN_VETERAN_COUNT} and {MAX_VETERAN_COUNT}")

        flight_doc = await self.store.get_typed_document(ctx, flight_id, FLIGHT_TYPE)
        flight_name = flight_doc.get("name") or ""

        selected = await self.store.query_view(
            ctx,
            WAITLIST_ACTIVE_VIEW,
            ViewQuery(limit=requested_count, include_docs=True),
        )
        selected.extend(await self._group_members(ctx, selected))

        result = AllocationResult()
        timestamp = utc_timestamp()
        processed_guardians: set[str] = set()

        for row in selected:
            if not row.doc:
                continue
            guardian_id = await self._add_veteran(ctx, row.id, row.doc, flight_name, user_name, timestamp, result)
            if guardian_id is None:
                continue
            if len(guardian_id) != GUARDIAN_ID_LENGTH or guardian_id in processed_guardians:
                continue
            processed_guardians.add(guardian_id)
            await self._add_guardian(ctx, guardian_id, flight_name, user_name, timestamp, result)

        logger.info(
            f"Flight {flight_name}: added {result.added_veterans} veterans and "
            f"{result.added_guardians} guardians ({len(result.errors)} errors) by {user_name}"
        )
        return result

    async def _group_members(self, ctx: RequestContext, selected: list[ViewRow]) -> list[ViewRow]:
        """Other unflighted members of every group present in ``selected``."""
        groups: dict[str, set[str | None]] = {}
        for row in selected:
            if isinstance(row.value, str) and row.value:
                groups.setdefault(row.value, set()).add(row.id)
        if not groups:
            return []

        try:
            rows = await self.store.query_view(ctx, VETERAN_GROUPS_VIEW, ViewQuery(include_docs=True))
        except StoreRequestError as e:
            logger.warning(
                f"Group lookup failed ({e}); continuing without other members of groups: "
                f"{', '.join(sorted(groups))}"
            )
            return []

        members: list[ViewRow] = []
        for row in rows:
            existing = groups.get(row.key) if isinstance(row.key, str) else None
            if existing is None or row.id in existing:
                continue
            flight = (row.doc or {}).get("flight") or {}
            if is_unflighted(flight.get("id")):
                members.append(ViewRow(key=row.key, value="", id=row.id, doc=row.doc))

        if members:
            logger.debug(f"Group closure added {len(members)} veterans")
        return members

    async def _add_veteran(
        self,
        ctx: RequestContext,
        row_id: str | None,
        doc: dict[str, Any],
        flight_name: str,
        user_name: str,
        timestamp: str,
        result: AllocationResult,
    ) -> str | None:
        """Assign and save one veteran; returns its guardian id once saved."""
        doc_id = doc.get("_id") or row_id
        try:
            veteran = Veteran.from_document(doc)
            veteran.assign_flight(flight_name, user_name, timestamp)
            await self.store.replace_document(ctx, veteran.to_document())
        except StoreSessionError:
            raise
        except StoreRequestError as e:
            logger.warning(f"Failed to save veteran {doc_id}: {e.reason}")
            result.add_error(f"Failed to save veteran {doc_id}: {e.reason}")
            return None
        except (StoreError, ValueError) as e:
            logger.warning(f"Error processing veteran {row_id}: {e}")
            result.add_error(f"Error processing veteran {row_id}: {e}")
            return None

        result.increment_veterans()
        return veteran.guardian.id or None

    async def _add_guardian(
        self,
        ctx: RequestContext,
        guardian_id: str,
        flight_name: str,
        user_name: str,
        timestamp: str,
        result: AllocationResult,
    ) -> None:
        try:
            guardian = Guardian.from_document(await self.store.get_document(ctx, guardian_id))
        except StoreSessionError:
            raise
        except (StoreError, ValueError) as e:
            logger.warning(f"Error processing guardian {guardian_id}: {e}")
            result.add_error(f"Error processing guardian {guardian_id}: {e}")
            return

        if guardian.flight.id == flight_name:
            return
        guardian.assign_flight(flight_name, user_name, timestamp)

        try:
            await self.store.replace_document(ctx, guardian.to_document())
        except StoreSessionError:
            raise
        except StoreRequestError as e:
            logger.warning(f"Failed to save guardian {guardian_id}: {e.reason}")
            result.add_error(f"Failed to save guardian {guardian_id}: {e.reason}")
            return

        result.increment_guardians()
