"""Seat and bus read model built from the ``flight_pairings`` view.

Unlike the assignment roster, people here are grouped under the guardian they
fly with, and buses are normalized so the bus/tour statistics add up.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .flight_assignment import FlightSummary, parse_flag
from .participants import GUARDIAN_TYPE, VETERAN_TYPE

NO_BUS = "None"
TOURS = ("Alpha", "Bravo")
VALID_BUSES = (NO_BUS, *(f"{tour}{n}" for tour in TOURS for n in range(1, 6)))


def normalize_bus(value: Any) -> str:
    """A known bus name, or "None" for anything else."""
    if not isinstance(value, str):
        return NO_BUS
    value = value.strip()
    return value if value in VALID_BUSES else NO_BUS


def parse_detail_confirmed(value: Any) -> bool:
    """The pairings view emits "" for a confirmed person and "unconfirmed" otherwise."""
    if isinstance(value, str) and value.strip() == "":
        return True
    return parse_flag(value, "confirmed")


def _text(value: Any) -> str:
    return "" if value is None else str(value)


class FlightDetailPerson(BaseModel):
    """One veteran or guardian with seat and bus assignment."""

    type: str = ""
    id: str = ""
    name_first: str = ""
    name_last: str = ""
    city: str = ""
    bus: str = NO_BUS
    seat: str = ""
    shirt: str = ""
    nofly: bool = False
    confirmed: bool = False
    # Veteran only
    med_limits: str | None = None
    group: str | None = None
    # Guardian only
    med_exprnc: str | None = None
    training: str | None = None
    training_complete: bool | None = None

    @classmethod
    def from_view_value(cls, value: dict[str, Any]) -> FlightDetailPerson:
        kind = _text(value.get("type"))
        person = cls(
            type=kind,
            id=_text(value.get("id")),
            name_first=_text(value.get("name_first")),
            name_last=_text(value.get("name_last")),
            city=_text(value.get("city")),
            bus=normalize_bus(value.get("bus")),
            seat=_text(value.get("seat")),
            shirt=_text(value.get("shirt")),
            nofly=parse_flag(value.get("nofly"), "nofly"),
            confirmed=parse_detail_confirmed(value.get("confirmed")),
        )
        if kind == VETERAN_TYPE:
            person.med_limits = _text(value.get("med_limits"))
            person.group = _text(value.get("group"))
        elif kind == GUARDIAN_TYPE:
            person.med_exprnc = _text(value.get("med_exprnc"))
            person.training = _text(value.get("training"))
            person.training_complete = parse_flag(value.get("training_complete"), "true")
        return person


class FlightDetailPair(BaseModel):
    """A guardian with every on-flight veteran paired to them, or a lone veteran."""

    model_config = ConfigDict(populate_by_name=True)

    pair_id: str = Field(default="", alias="pairId")
    bus_mismatch: bool = Field(default=False, alias="busMismatch")
    missing_paired_person: bool = Field(default=False, alias="missingPairedPerson")
    people: list[FlightDetailPerson] = Field(default_factory=list)

    def check_bus_mismatch(self) -> bool:
        """True when two or more people in the group ride different buses."""
        self.bus_mismatch = len({p.bus for p in self.people}) > 1
        return self.bus_mismatch


class FlightDetailStats(BaseModel):
    """Distinct people per bus, per tour, and per tour excluding nofly."""

    buses: dict[str, int] = Field(default_factory=lambda: dict.fromkeys(VALID_BUSES, 0))
    tours: dict[str, int] = Field(default_factory=lambda: dict.fromkeys((*TOURS, NO_BUS), 0))
    flight: dict[str, int] = Field(default_factory=lambda: dict.fromkeys((*TOURS, NO_BUS), 0))


class FlightDetail(BaseModel):
    """Body of the flight detail read endpoint."""

    flight: FlightSummary = Field(default_factory=FlightSummary)
    stats: FlightDetailStats = Field(default_factory=FlightDetailStats)
    pairs: list[FlightDetailPair] = Field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        body = self.model_dump(by_alias=True, exclude={"flight": {"rev"}, "pairs": True})
        body["pairs"] = [
            {
                **pair.model_dump(by_alias=True, exclude={"people"}),
                # Type-specific fields appear only on the matching kind
                "people": [person.model_dump(exclude_none=True) for person in pair.people],
            }
            for pair in self.pairs
        ]
        return body
