"""
Pydantic schemas for guardian endpoints.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PairingSyncResponse(BaseModel):
    """Veteran-side outcome of a guardian's pairing changes."""

    succeeded: list[str] = Field(default_factory=list, description="Veteran ids paired or unpaired")
    paired: list[str] = Field(default_factory=list, description="Veteran ids newly paired to the guardian")
    unpaired: list[str] = Field(default_factory=list, description="Veteran ids unpaired from the guardian")
    skipped: list[str] = Field(
        default_factory=list, description="Removed veteran ids already paired to a different guardian; left untouched"
    )
    errors: list[str] = Field(default_factory=list, description="One message per veteran that could not be updated")


class GuardianUpdateResponse(BaseModel):
    """Saved guardian document plus the pairing sync outcome."""

    model_config = ConfigDict(populate_by_name=True)

    guardian: dict[str, Any] = Field(description="Guardian document as saved")
    pairing_sync: PairingSyncResponse = Field(alias="pairingSync")
