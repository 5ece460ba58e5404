"""
Waitlist Router - Waitlist listings for veterans and guardians.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from honorflight.services import WaitlistPage, WaitlistService
from honorflight.services.waitlist import DEFAULT_PAGE_SIZE
from honorflight.store import RequestContext

from ..dependencies import get_request_context, get_waitlist_service

router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.get("")
async def get_waitlist(
    type: str = Query("", description='"veterans" or "guardians"'),
    offset: int = Query(0, description="Rows to skip; negative values are treated as 0"),
    limit: int = Query(DEFAULT_PAGE_SIZE, description="Page size; values below 1 use the default"),
    ctx: RequestContext = Depends(get_request_context),
    service: WaitlistService = Depends(get_waitlist_service),
) -> list[dict[str, Any]]:
    """One page of the veteran or guardian waitlist in view order.

    A missing or unknown ``type`` is a 400.
    """
    try:
        return await service.list_waitlist(ctx, WaitlistPage(type=type, offset=offset, limit=limit))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.get("/veteran-groups")
async def get_veteran_groups(
    ctx: RequestContext = Depends(get_request_context),
    service: WaitlistService = Depends(get_waitlist_service),
) -> list[dict[str, Any]]:
    """Waitlisted veterans grouped by group code, groups in natural order."""
    return await service.list_veteran_groups(ctx)
