"""
Domain models: participant documents, audit history, and flight roster and detail views.
"""

from __future__ import annotations

from .flight_assignment import (
    AssignmentCounts,
    AssignmentPair,
    AssignmentPerson,
    FlightAssignment,
    FlightSummary,
    parse_flag,
)
from .flight_detail import FlightDetail, FlightDetailPair, FlightDetailPerson, FlightDetailStats
from .history import HistoryEntry, HistoryTable, TrackedField, record_changes, utc_timestamp
from .participants import (
    FLIGHT_TYPE,
    GUARDIAN_TYPE,
    NO_FLIGHT,
    VETERAN_TYPE,
    Guardian,
    Pairing,
    Participant,
    Veteran,
)
from .results import AllocationResult, SyncResult

__all__ = [
    "FLIGHT_TYPE",
    "GUARDIAN_TYPE",
    "NO_FLIGHT",
    "VETERAN_TYPE",
    "AllocationResult",
    "AssignmentCounts",
    "AssignmentPair",
    "AssignmentPerson",
    "FlightAssignment",
    "FlightDetail",
    "FlightDetailPair",
    "FlightDetailPerson",
    "FlightDetailStats",
    "FlightSummary",
    "Guardian",
    "HistoryEntry",
    "HistoryTable",
    "Pairing",
    "Participant",
    "SyncResult",
    "TrackedField",
    "Veteran",
    "parse_flag",
    "record_changes",
    "utc_timestamp",
]
