"""Keep veterans' guardian references in step with a guardian's pairing list.

The guardian's ``veteran.pairings`` list is authoritative. When it changes,
each added or removed veteran is updated to point at (or away from) the
guardian, and the guardian's own pairing history mirrors every veteran-side
change that was actually saved.

There are no multi-document transactions: a veteran that cannot be fetched,
is not a veteran, fails validation, or fails to save is reported in
``SyncResult.errors`` and the remaining veterans are still processed.
A removed veteran that already points at a different guardian is left as is
and listed in ``SyncResult.skipped``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from honorflight.models.history import PAIRED_TEMPLATE, UNPAIRED_TEMPLATE, HistoryEntry, utc_timestamp
from honorflight.models.participants import VETERAN_TYPE, Guardian, Pairing, Veteran
from honorflight.models.results import SyncResult
from honorflight.store.errors import StoreError, StoreSessionError
from honorflight.validation import validate_veteran

if TYPE_CHECKING:
    from honorflight.store.client import RequestContext
    from honorflight.store.documents import DocumentStore

logger = logging.getLogger(__name__)


def diff_pairings(old: Sequence[Pairing], new: Sequence[Pairing]) -> tuple[list[Pairing], list[Pairing]]:
    """Return (added, removed) by pairing id, each in its source list's order."""
    old_ids = {p.id for p in old}
    new_ids = {p.id for p in new}
    added = [p for p in new if p.id not in old_ids]
    removed = [p for p in old if p.id not in new_ids]
    return added, removed


class PairingSynchronizer:
    """Applies a guardian's pairing changes to the affected veterans."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    async def sync(
        self,
        ctx: RequestContext,
        guardian: Guardian,
        old_pairings: Sequence[Pairing],
        new_pairings: Sequence[Pairing],
        user_name: str,
        timestamp: str | None = None,
    ) -> SyncResult:
        """Pair added veterans to ``guardian`` and unpair removed ones.

        The guardian must already be validated and prepared. It is mutated
        (mirrored history) but not saved; persisting it is the caller's job.

        Raises:
            StoreSessionError: database session lost; never recorded per item
        """
        result = SyncResult()
        added, removed = diff_pairings(old_pairings, new_pairings)
        if not added and not removed:
            return result

        timestamp = timestamp or utc_timestamp()
        guardian_name = guardian.full_name

        for pairing in added:
            veteran_name = await self._apply(ctx, pairing, guardian, True, user_name, timestamp, result)
            if veteran_name is not None:
                guardian.veteran.history.append(
                    HistoryEntry(timestamp=timestamp, change=PAIRED_TEMPLATE.format(name=veteran_name, user=user_name))
                )
                result.paired.append(pairing.id)

        for pairing in removed:
            veteran_name = await self._apply(ctx, pairing, guardian, False, user_name, timestamp, result)
            if veteran_name is not None:
                guardian.veteran.history.append(
                    HistoryEntry(
                        timestamp=timestamp, change=UNPAIRED_TEMPLATE.format(name=veteran_name, user=user_name)
                    )
                )
                result.unpaired.append(pairing.id)

        logger.info(
            f"Guardian {guardian.id} ({guardian_name}): paired {len(result.paired)}, "
            f"unpaired {len(result.unpaired)}, {len(result.errors)} errors"
        )
        return result

    async def _apply(
        self,
        ctx: RequestContext,
        pairing: Pairing,
        guardian: Guardian,
        pair: bool,
        user_name: str,
        timestamp: str,
        result: SyncResult,
    ) -> str | None:
        """Update one veteran's guardian reference; returns its name once saved."""
        action = "pair" if pair else "unpair"
        try:
            doc = await self.store.get_typed_document(ctx, pairing.id, VETERAN_TYPE)
            veteran = Veteran.from_document(doc)

            if pair:
                veteran.guardian.id = guardian.id
                veteran.guardian.name = guardian.full_name
                template = PAIRED_TEMPLATE
            elif veteran.guardian.id != guardian.id:
                # Re-paired elsewhere since this guardian last saved; leave that link alone
                logger.info(
                    f"Veteran {pairing.id} is paired to {veteran.guardian.id or 'no guardian'}, "
                    f"not {guardian.id}; skipping unpair"
                )
                result.skipped.append(pairing.id)
                return None
            else:
                veteran.guardian.id = ""
                veteran.guardian.name = ""
                template = UNPAIRED_TEMPLATE
            veteran.guardian.history.append(
                HistoryEntry(timestamp=timestamp, change=template.format(name=guardian.full_name, user=user_name))
            )

            veteran.prepare_for_save(user_name, timestamp)
            validate_veteran(veteran)
            await self.store.replace_document(ctx, veteran.to_document())
        except StoreSessionError:
            raise
        except (StoreError, ValueError) as e:
            logger.warning(f"Failed to {action} veteran {pairing.id} for guardian {guardian.id}: {e}")
            result.errors.append(f"Failed to {action} veteran {pairing.id}: {e}")
            return None

        return veteran.full_name or pairing.name
