"""Flight assignment read model built from the ``flight_assignment`` view."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def parse_flag(value: Any, truthy: str) -> bool:
    """Interpret a view flag.

    Views emit a marker word (e.g. "nofly", "confirmed", "Y") for true and a
    single space for false. Direct data may carry a real boolean instead.
    """
    if value is True:
        return True
    if isinstance(value, str) and value.strip().lower() == truthy.lower():
        return True
    return False


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ("" if value is None else str(value))


class AssignmentPerson(BaseModel):
    """Flattened projection of one veteran or guardian on a flight."""

    type: str = ""
    id: str = ""
    name_first: str = ""
    name_last: str = ""
    city: str = ""
    appdate: str = ""
    group: str = ""
    nofly: bool = False
    fm_number: str = ""
    assigned_to: str = ""
    mail_sent: bool = False
    email_sent: bool = False
    confirmed: bool = False
    paired_with: str = ""

    @field_validator(
        "type", "id", "name_first", "name_last", "city", "appdate", "group", "fm_number", "assigned_to", "paired_with",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _text(v)

    @field_validator("nofly", mode="before")
    @classmethod
    def _parse_nofly(cls, v: Any) -> bool:
        return parse_flag(v, "nofly")

    @field_validator("confirmed", mode="before")
    @classmethod
    def _parse_confirmed(cls, v: Any) -> bool:
        return parse_flag(v, "confirmed")

    @field_validator("mail_sent", "email_sent", mode="before")
    @classmethod
    def _parse_yes_no(cls, v: Any) -> bool:
        return parse_flag(v, "Y")

    @classmethod
    def from_view_value(cls, value: dict[str, Any]) -> AssignmentPerson:
        known = {name: value.get(name) for name in cls.model_fields}
        return cls.model_validate(known)


class AssignmentPair(BaseModel):
    """A veteran/guardian pairing (or a lone participant) on a flight."""

    model_config = ConfigDict(populate_by_name=True)

    pair_id: str = Field(default="", alias="pairId")
    group: str = ""
    app_date: str = Field(default="", alias="appDate")
    missing_person: bool = Field(default=False, alias="missingPerson")
    people: list[AssignmentPerson] = Field(default_factory=list)

    @field_validator("missing_person", mode="before")
    @classmethod
    def _parse_missing(cls, v: Any) -> bool:
        return parse_flag(v, "true")

    def add_person(self, person: AssignmentPerson) -> None:
        self.people.append(person)

    def check_missing_person(self) -> bool:
        """Flag a lone member whose partner is named but absent from the flight."""
        if len(self.people) < 2:
            first = self.people[0] if self.people else None
            if first is not None and first.paired_with.strip():
                self.missing_person = True
        return self.missing_person


class AssignmentCounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    veterans: int = 0
    guardians: int = 0
    veterans_confirmed: int = Field(default=0, alias="veteransConfirmed")
    guardians_confirmed: int = Field(default=0, alias="guardiansConfirmed")
    remaining: int = 0


class FlightSummary(BaseModel):
    id: str = ""
    rev: str = ""
    name: str = ""
    capacity: int = 0
    flight_date: str = ""

    @classmethod
    def from_flight_doc(cls, doc: dict[str, Any]) -> FlightSummary:
        return cls(
            id=doc.get("_id") or "",
            rev=doc.get("_rev") or "",
            name=doc.get("name") or "",
            capacity=int(doc.get("capacity") or 0),
            flight_date=doc.get("flight_date") or "",
        )


class FlightAssignment(BaseModel):
    """Body of the flight assignment read endpoint."""

    flight: FlightSummary = Field(default_factory=FlightSummary)
    counts: AssignmentCounts = Field(default_factory=AssignmentCounts)
    pairs: list[AssignmentPair] = Field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
