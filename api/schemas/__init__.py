"""
Pydantic schemas for the Honor Flight API.

Re-exports all schemas for convenient importing.
"""

from __future__ import annotations

from .flight_assignments import AddVeteransRequest, AddVeteransResponse
from .guardians import GuardianUpdateResponse, PairingSyncResponse

__all__ = [
    "AddVeteransRequest",
    "AddVeteransResponse",
    "GuardianUpdateResponse",
    "PairingSyncResponse",
]
