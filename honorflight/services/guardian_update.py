"""Guardian update with pairing synchronization."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from honorflight.models.history import utc_timestamp
from honorflight.models.participants import GUARDIAN_TYPE, Guardian
from honorflight.models.results import SyncResult
from honorflight.validation import validate_guardian

from .pairing_sync import PairingSynchronizer

if TYPE_CHECKING:
    from honorflight.store.client import RequestContext
    from honorflight.store.documents import DocumentStore

logger = logging.getLogger(__name__)


class GuardianUpdateService:
    """Saves a guardian and reconciles the veterans its pairings point at.

    Order matters: the guardian is validated before any veteran is touched,
    and it is written last so its history carries only the pairings that
    were actually applied on the veteran side.
    """

    def __init__(self, store: DocumentStore, synchronizer: PairingSynchronizer | None = None) -> None:
        self.store = store
        self.synchronizer = synchronizer or PairingSynchronizer(store)

    async def update_guardian(
        self,
        ctx: RequestContext,
        guardian_id: str,
        payload: dict[str, Any],
        user_name: str,
    ) -> tuple[Guardian, SyncResult]:
        """Apply ``payload`` to the stored guardian.

        Raises:
            DocumentNotFoundError: guardian does not exist
            WrongDocumentKindError: id names a non-guardian document
            ValidationFailedError: updated guardian is invalid; nothing was written
            DocumentConflictError: the guardian's revision is stale
            StoreSessionError: database session lost
        """
        current = Guardian.from_document(await self.store.get_typed_document(ctx, guardian_id, GUARDIAN_TYPE))

        updated = Guardian.from_document(payload)
        updated.id = current.id
        updated.rev = current.rev
        updated.type = GUARDIAN_TYPE
        # History is append-only: start from the stored entries, never the payload's
        updated.flight.history = list(current.flight.history)
        updated.call.history = list(current.call.history)
        updated.veteran.history = list(current.veteran.history)
        if not updated.metadata.created_at:
            updated.metadata.created_at = current.metadata.created_at
            updated.metadata.created_by = current.metadata.created_by

        timestamp = utc_timestamp()
        updated.update_history(current, user_name, timestamp)
        updated.prepare_for_save(user_name, timestamp)
        validate_guardian(updated)

        sync_result = await self.synchronizer.sync(
            ctx, updated, current.pairings, updated.pairings, user_name, timestamp
        )

        updated.rev = await self.store.replace_document(ctx, updated.to_document())
        logger.info(f"Guardian {guardian_id} updated by {user_name}")
        return updated, sync_result
