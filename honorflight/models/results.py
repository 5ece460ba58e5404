"""Outcome objects for multi-document flows.

Partial failure is a normal outcome: these collect what succeeded and one
message per item that did not, instead of raising on the first failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AllocationResult:
    """Result of promoting waitlisted veterans onto a flight."""

    added_veterans: int = 0
    added_guardians: int = 0
    errors: list[str] = field(default_factory=list)

    def increment_veterans(self) -> None:
        self.added_veterans += 1

    def increment_guardians(self) -> None:
        self.added_guardians += 1

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "addedVeterans": self.added_veterans,
            "addedGuardians": self.added_guardians,
            "errors": list(self.errors),
        }


@dataclass
class SyncResult:
    """Result of reconciling a guardian's pairings with the veterans' side."""

    paired: list[str] = field(default_factory=list)
    unpaired: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> list[str]:
        return self.paired + self.unpaired

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "paired": list(self.paired),
            "unpaired": list(self.unpaired),
            "skipped": list(self.skipped),
            "errors": list(self.errors),
        }
