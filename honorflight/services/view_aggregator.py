"""Turn flat view rows into pairings, occupancy counts, bus statistics, and group listings.

Rows arrive already sorted by the view; nothing here re-sorts input before
grouping.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from honorflight.models.flight_assignment import AssignmentCounts, AssignmentPair, AssignmentPerson
from honorflight.models.flight_detail import (
    NO_BUS,
    TOURS,
    VALID_BUSES,
    FlightDetailPair,
    FlightDetailPerson,
    FlightDetailStats,
)
from honorflight.models.participants import GUARDIAN_TYPE, VETERAN_TYPE
from honorflight.store.documents import ViewRow

DEFAULT_GROUP_SORT_KEY = "aa"


def build_pairs(rows: Iterable[ViewRow]) -> list[AssignmentPair]:
    """Group consecutive rows sharing a pair key into AssignmentPairs.

    A new pair opens whenever the row's ``pair`` value differs from the
    previous row's; each closed pair has its missing-person flag computed.
    """
    pairs: list[AssignmentPair] = []
    current: AssignmentPair | None = None
    last_pair_id: Any = None

    for row in rows:
        value = row.value or {}
        pair_id = value.get("pair")

        if current is None or pair_id != last_pair_id:
            if current is not None:
                current.check_missing_person()
                pairs.append(current)
            current = AssignmentPair(
                pair_id=pair_id or "",
                group=value.get("group") or "",
                app_date=value.get("appdate") or "",
            )
            last_pair_id = pair_id

        current.add_person(AssignmentPerson.from_view_value(value))

    if current is not None:
        current.check_missing_person()
        pairs.append(current)

    return pairs


def calculate_counts(pairs: Iterable[AssignmentPair], capacity: int) -> AssignmentCounts:
    """Count distinct non-nofly people per type.

    The same id can appear under more than one pair, so counts are set sizes,
    never row counts.
    """
    veterans: set[str] = set()
    guardians: set[str] = set()
    veterans_confirmed: set[str] = set()
    guardians_confirmed: set[str] = set()

    for pair in pairs:
        for person in pair.people:
            if person.nofly:
                continue
            if person.type == VETERAN_TYPE:
                veterans.add(person.id)
                if person.confirmed:
                    veterans_confirmed.add(person.id)
            elif person.type == GUARDIAN_TYPE:
                guardians.add(person.id)
                if person.confirmed:
                    guardians_confirmed.add(person.id)

    return AssignmentCounts(
        veterans=len(veterans),
        guardians=len(guardians),
        veterans_confirmed=len(veterans_confirmed),
        guardians_confirmed=len(guardians_confirmed),
        remaining=capacity - len(veterans) - len(guardians),
    )


def pair_sort_key(pair: AssignmentPair) -> str:
    return (pair.group or DEFAULT_GROUP_SORT_KEY) + pair.app_date


def sort_pairs(pairs: list[AssignmentPair]) -> list[AssignmentPair]:
    """Sort in place, descending by group (or "aa") concatenated with app date.

    This is a plain string comparison, the display order the flight roster
    has always used.
    """
    pairs.sort(key=pair_sort_key, reverse=True)
    return pairs


def natural_key(text: str) -> list[Any]:
    """Case-insensitive sort key that orders embedded numbers numerically."""
    return [int(part) if part.isdigit() else part.casefold() for part in re.split(r"(\d+)", text)]


def group_waitlist_names(rows: Iterable[ViewRow]) -> list[dict[str, Any]]:
    """Collect ``waitlist_veteran_groups`` rows into ``{group, names}`` entries.

    Groups are returned in natural ascending order ("853-3" before "855-2",
    "9" before "10").
    """
    grouped: dict[str, list[Any]] = {}
    for row in rows:
        grouped.setdefault(str(row.key), []).append(row.value)

    return [{"group": group, "names": names} for group, names in sorted(grouped.items(), key=lambda g: natural_key(g[0]))]


def build_detail_pairs(rows: Iterable[ViewRow]) -> list[FlightDetailPair]:
    """Group ``flight_pairings`` rows under the on-flight guardian each veteran flies with.

    Output order: guardian groups in order of their first veteran, then
    guardians with no veteran on the flight, then lone veterans (no pairing,
    or a guardian not on this flight). A guardian repeated once per paired
    veteran appears once, carrying the pairing from its first row.
    """
    on_flight: set[str] = set()
    guardians: dict[str, tuple[FlightDetailPerson, str]] = {}
    veterans: list[tuple[FlightDetailPerson, str]] = []

    for row in rows:
        value = row.value or {}
        person = FlightDetailPerson.from_view_value(value)
        pairing = str(value.get("pairing") or "")
        on_flight.add(person.id)
        if person.type == GUARDIAN_TYPE:
            guardians.setdefault(person.id, (person, pairing))
        else:
            veterans.append((person, pairing))

    grouped: dict[str, list[FlightDetailPerson]] = {}
    lone: list[tuple[FlightDetailPerson, str]] = []
    for person, pairing in veterans:
        if pairing and pairing in guardians:
            grouped.setdefault(pairing, []).append(person)
        else:
            lone.append((person, pairing))
    for guardian_id in guardians:
        grouped.setdefault(guardian_id, [])

    pairs: list[FlightDetailPair] = []
    for guardian_id, group_veterans in grouped.items():
        guardian, pairing = guardians[guardian_id]
        pair = FlightDetailPair(pair_id=guardian_id, people=[*group_veterans, guardian])
        pair.check_bus_mismatch()
        pair.missing_paired_person = bool(pairing) and pairing not in on_flight
        pairs.append(pair)

    for person, pairing in lone:
        pairs.append(
            FlightDetailPair(
                pair_id=person.id,
                people=[person],
                missing_paired_person=bool(pairing) and pairing not in on_flight,
            )
        )

    return pairs


def calculate_bus_stats(pairs: Iterable[FlightDetailPair]) -> FlightDetailStats:
    """Distinct people per bus; tours sum their five buses; ``flight`` leaves out nofly."""
    riders: dict[str, set[str]] = {bus: set() for bus in VALID_BUSES}
    flying: dict[str, set[str]] = {bus: set() for bus in VALID_BUSES}

    for pair in pairs:
        for person in pair.people:
            if person.bus not in riders:
                continue
            riders[person.bus].add(person.id)
            if not person.nofly:
                flying[person.bus].add(person.id)

    stats = FlightDetailStats()
    stats.buses = {bus: len(ids) for bus, ids in riders.items()}
    for tour in TOURS:
        tour_buses = [bus for bus in VALID_BUSES if bus.startswith(tour)]
        stats.tours[tour] = sum(len(riders[bus]) for bus in tour_buses)
        stats.flight[tour] = sum(len(flying[bus]) for bus in tour_buses)
    stats.tours[NO_BUS] = len(riders[NO_BUS])
    stats.flight[NO_BUS] = len(flying[NO_BUS])
    return stats
