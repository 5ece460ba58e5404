"""Audit history entries and tracked-field change detection.

History arrays are append-only. A change entry is written only when a
tracked field's value differs between the stored and the updated document.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
TIMESTAMP_PATTERN = r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$"

# Guardian audit text carries colons after from/to; veteran text never has.
# Stored history depends on both, so they stay distinct.
GUARDIAN_CHANGE_TEMPLATE = "changed {field} from: {old} to: {new} by: {user}"
VETERAN_CHANGE_TEMPLATE = "changed {field} from {old} to {new} by: {user}"

FLIGHT_CHANGE_TEMPLATE = "changed flight from: {old} to: {new} by: {user}"
PAIRED_TEMPLATE = "paired to: {name} by: {user}"
UNPAIRED_TEMPLATE = "unpaired from: {name} by: {user}"


def utc_timestamp(now: datetime | None = None) -> str:
    """Second-precision UTC timestamp with trailing Z (no fractional seconds)."""
    return (now or datetime.now(UTC)).strftime(TIMESTAMP_FORMAT)


class HistoryEntry(BaseModel):
    """One audit line. Stored as ``{"id": <timestamp>, "change": <text>}``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    timestamp: str = Field(default="", alias="id")
    change: str = ""


def format_value(value: Any) -> str:
    """Render a field value the way existing audit text shows it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class TrackedField:
    """A field whose changes are audited, and the name shown in history."""

    accessor: Callable[[Any], Any]
    display_name: str


@dataclass(frozen=True)
class HistoryTable:
    """The tracked fields that report into one history array."""

    history: Callable[[Any], list[HistoryEntry]]
    fields: Sequence[TrackedField]


def record_changes(
    tables: Sequence[HistoryTable],
    current: Any,
    updated: Any,
    user_name: str,
    timestamp: str,
    template: str,
) -> list[HistoryEntry]:
    """Append one entry per changed tracked field onto ``updated``'s history arrays.

    Returns the entries that were appended.
    """
    appended: list[HistoryEntry] = []
    for table in tables:
        target = table.history(updated)
        for tracked in table.fields:
            old_value = tracked.accessor(current)
            new_value = tracked.accessor(updated)
            if old_value == new_value:
                continue
            entry = HistoryEntry(
                timestamp=timestamp,
                change=template.format(
                    field=tracked.display_name,
                    old=format_value(old_value),
                    new=format_value(new_value),
                    user=user_name,
                ),
            )
            target.append(entry)
            appended.append(entry)
    return appended
