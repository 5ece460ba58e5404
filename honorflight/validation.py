"""Structural validation gate for participant documents.

Every multi-document flow runs the gate before its first write, so an
invalid document never causes a mutation. Messages are collected rather
than failing on the first problem.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from honorflight.models.history import TIMESTAMP_PATTERN, HistoryEntry
from honorflight.models.participants import GUARDIAN_TYPE, VETERAN_TYPE, Guardian, Participant, Veteran
from honorflight.store.errors import ValidationFailedError

_TIMESTAMP_RE = re.compile(TIMESTAMP_PATTERN)


def _check_names(participant: Participant, errors: list[str]) -> None:
    if not participant.name.first.strip():
        errors.append("First name is required")
    if not participant.name.last.strip():
        errors.append("Last name is required")


def _check_history(label: str, entries: Iterable[HistoryEntry], errors: list[str]) -> None:
    for index, entry in enumerate(entries, start=1):
        if not entry.timestamp or not _TIMESTAMP_RE.match(entry.timestamp):
            errors.append(f"{label} history entry {index} has invalid timestamp format")
        if not entry.change:
            errors.append(f"{label} history entry {index} must have a change description")


def validate_veteran(veteran: Veteran) -> None:
    errors: list[str] = []
    _check_names(veteran, errors)
    if veteran.type != VETERAN_TYPE:
        errors.append("Document type must be Veteran")
    _check_history("Flight", veteran.flight.history, errors)
    _check_history("Call", veteran.call.history, errors)
    _check_history("Guardian", veteran.guardian.history, errors)

    if errors:
        raise ValidationFailedError(errors)


def validate_guardian(guardian: Guardian) -> None:
    errors: list[str] = []
    _check_names(guardian, errors)
    if guardian.type != GUARDIAN_TYPE:
        errors.append("Document type must be Guardian")
    _check_history("Flight", guardian.flight.history, errors)
    _check_history("Call", guardian.call.history, errors)
    _check_history("Veteran", guardian.veteran.history, errors)

    for index, pairing in enumerate(guardian.veteran.pairings, start=1):
        if not pairing.id:
            errors.append(f"Veteran pairing {index} must have a valid id")
        if not pairing.name:
            errors.append(f"Veteran pairing {index} must have a valid name")

    if errors:
        raise ValidationFailedError(errors)
