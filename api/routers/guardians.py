"""
Guardians Router - Guardian update endpoint.

Saving a guardian also repoints every veteran added to or removed from its
pairing list.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from honorflight.auth_middleware import AuthUser, get_current_user
from honorflight.services import GuardianUpdateService
from honorflight.store import RequestContext

from ..dependencies import get_guardian_update_service, get_request_context
from ..schemas import GuardianUpdateResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/guardians", tags=["guardians"])


@router.put("/{guardian_id}", response_model=GuardianUpdateResponse, response_model_by_alias=True)
async def update_guardian(
    guardian_id: str,
    payload: dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: GuardianUpdateService = Depends(get_guardian_update_service),
    user: AuthUser = Depends(get_current_user),
) -> dict[str, Any]:
    guardian, sync_result = await service.update_guardian(ctx, guardian_id, payload, user.display_name)
    if sync_result.errors:
        logger.warning(f"Guardian {guardian_id} saved with {len(sync_result.errors)} pairing errors")
    return {"guardian": guardian.to_document(), "pairingSync": sync_result.to_dict()}
