"""
Flight Assignments Router - Flight roster, seat/bus detail, and waitlist allocation endpoints.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from honorflight.auth_middleware import AuthUser, get_current_user
from honorflight.services import FlightAssignmentService, WaitlistAllocator
from honorflight.store import RequestContext

from ..dependencies import get_flight_assignment_service, get_request_context, get_waitlist_allocator
from ..schemas import AddVeteransRequest, AddVeteransResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/flights", tags=["flight-assignments"])


@router.get("/{flight_id}/assignments")
async def get_flight_assignments(
    flight_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: FlightAssignmentService = Depends(get_flight_assignment_service),
) -> dict[str, Any]:
    """Flight summary, seat counts, and veteran/guardian pairs sorted for display."""
    assignment = await service.get_assignments(ctx, flight_id)
    return assignment.to_json()


@router.get("/{flight_id}/detail")
async def get_flight_detail(
    flight_id: str,
    ctx: RequestContext = Depends(get_request_context),
    service: FlightAssignmentService = Depends(get_flight_assignment_service),
) -> dict[str, Any]:
    """Seat and bus assignments grouped by guardian, with per-bus and per-tour counts.

    ``busMismatch`` marks groups split across buses; ``missingPairedPerson``
    marks a pairing whose partner is not on this flight.
    """
    detail = await service.get_detail(ctx, flight_id)
    return detail.to_json()


@router.post("/{flight_id}/assignments", response_model=AddVeteransResponse, response_model_by_alias=True)
async def add_veterans_to_flight(
    flight_id: str,
    body: AddVeteransRequest,
    ctx: RequestContext = Depends(get_request_context),
    allocator: WaitlistAllocator = Depends(get_waitlist_allocator),
    user: AuthUser = Depends(get_current_user),
) -> dict[str, Any]:
    """Move the next ``veteranCount`` waitlisted veterans onto the flight.

    Group members and paired guardians come along. Per-item failures are
    reported in ``errors`` with a 200 status.
    """
    logger.info(f"Adding {body.veteran_count} veterans to flight {flight_id} for {user.display_name}")
    try:
        result = await allocator.allocate(ctx, flight_id, body.veteran_count, user.display_name)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return result.to_dict()
