"""
Services - multi-document flows on top of the document store.

This package contains:
- view_aggregator: Flat view rows to pairs, counts, bus statistics, and group listings
- flight_assignments: Flight roster and seat/bus detail reads
- waitlist: Waitlist listings
- waitlist_allocator: Waitlist promotion onto a flight
- pairing_sync: Veteran side of guardian pairing changes
- guardian_update: Guardian save with pairing synchronization
"""

from __future__ import annotations

from .flight_assignments import FlightAssignmentService
from .guardian_update import GuardianUpdateService
from .pairing_sync import PairingSynchronizer, diff_pairings
from .view_aggregator import (
    build_detail_pairs,
    build_pairs,
    calculate_bus_stats,
    calculate_counts,
    group_waitlist_names,
    sort_pairs,
)
from .waitlist import WaitlistPage, WaitlistService
from .waitlist_allocator import WaitlistAllocator

__all__ = [
    "FlightAssignmentService",
    "GuardianUpdateService",
    "PairingSynchronizer",
    "WaitlistAllocator",
    "WaitlistPage",
    "WaitlistService",
    "build_detail_pairs",
    "build_pairs",
    "calculate_bus_stats",
    "calculate_counts",
    "diff_pairings",
    "group_waitlist_names",
    "sort_pairs",
]
