"""
Pydantic schemas for flight assignment endpoints.

Defines the request body for waitlist allocation and the response models
for allocation and pairing synchronization results.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AddVeteransRequest(BaseModel):
    """Request body for adding waitlisted veterans to a flight."""

    model_config = ConfigDict(populate_by_name=True)

    veteran_count: int = Field(
        alias="veteranCount",
        ge=1,
        le=100,
        description="Number of veterans to take from the top of the waitlist (1-100)",
    )


class AddVeteransResponse(BaseModel):
    """Outcome of a waitlist allocation run."""

    model_config = ConfigDict(populate_by_name=True)

    added_veterans: int = Field(alias="addedVeterans", description="Veterans saved onto the flight")
    added_guardians: int = Field(alias="addedGuardians", description="Paired guardians saved onto the flight")
    errors: list[str] = Field(default_factory=list, description="One message per veteran or guardian that failed")
