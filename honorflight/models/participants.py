"""Veteran and guardian documents.

Documents are schemaless in the store, so every model fills in defaults from
partial input and keeps fields it does not know about. Explicit nulls and
empty strings on declared fields fall back to the field default, matching how
intake has always treated blank values. Numbers stored in text fields (a zip
code typed as 53202) are read back as strings.
"""

from __future__ import annotations

from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .history import (
    FLIGHT_CHANGE_TEMPLATE,
    GUARDIAN_CHANGE_TEMPLATE,
    VETERAN_CHANGE_TEMPLATE,
    HistoryEntry,
    HistoryTable,
    TrackedField,
    record_changes,
    utc_timestamp,
)

VETERAN_TYPE = "Veteran"
GUARDIAN_TYPE = "Guardian"
FLIGHT_TYPE = "Flight"
NO_FLIGHT = "None"


class DocumentModel(BaseModel):
    """Base for store documents and their nested sections."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def _default_blank_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        declared: set[str] = set()
        for name, info in cls.model_fields.items():
            declared.add(name)
            if info.alias:
                declared.add(info.alias)
        return {k: v for k, v in data.items() if not (k in declared and (v is None or v == ""))}


class Name(DocumentModel):
    first: str = ""
    middle: str = ""
    last: str = ""
    nickname: str = ""


class Address(DocumentModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    county: str = ""
    phone_day: str = ""
    phone_eve: str = ""
    phone_mbl: str = ""
    email: str = ""


class Metadata(DocumentModel):
    created_at: str = ""
    created_by: str = ""
    updated_at: str = ""
    updated_by: str = ""


class Medical(DocumentModel):
    form: bool = False
    release: bool = False
    level: str = ""
    limitations: str = ""
    food_restriction: str = "None"


class Call(DocumentModel):
    fm_number: str = ""
    notes: str = ""
    assigned_to: str = ""
    mail_sent: bool = False
    email_sent: bool = False
    history: list[HistoryEntry] = Field(default_factory=list)


class Pairing(DocumentModel):
    """A guardian's reference to one paired veteran."""

    id: str = ""
    name: str = ""


class VeteranFlight(DocumentModel):
    id: str = ""
    status: str = "Active"
    group: str = ""
    bus: str = ""
    seat: str = ""
    confirmed_date: str = ""
    confirmed_by: str = ""
    status_note: str = ""
    nofly: bool = False
    history: list[HistoryEntry] = Field(default_factory=list)


class GuardianFlight(DocumentModel):
    id: str = NO_FLIGHT
    status: str = "Active"
    group: str = ""
    bus: str = NO_FLIGHT
    seat: str = ""
    confirmed_date: str = ""
    confirmed_by: str = ""
    status_note: str = ""
    nofly: bool = False
    history: list[HistoryEntry] = Field(default_factory=list)
    vaccinated: bool = False
    mediaWaiver: bool = False
    infection_test: bool = False
    waiver: bool = False
    training: str = ""
    training_notes: str = ""
    training_see_doc: bool = False
    training_complete: bool = False
    paid: bool = False
    exempt: bool = False
    booksOrdered: int = 0


class VeteranGuardianRef(DocumentModel):
    """A veteran's single active guardian pairing plus its history."""

    id: str = ""
    name: str = ""
    pref_notes: str = ""
    history: list[HistoryEntry] = Field(default_factory=list)


class GuardianVeteranRefs(DocumentModel):
    """A guardian's authoritative pairing list plus its history."""

    pref_notes: str = ""
    history: list[HistoryEntry] = Field(default_factory=list)
    pairings: list[Pairing] = Field(default_factory=list)


GUARDIAN_HISTORY_TABLES = [
    HistoryTable(
        history=lambda g: g.flight.history,
        fields=[
            TrackedField(lambda g: g.flight.id, "flight"),
            TrackedField(lambda g: g.flight.bus, "bus"),
            TrackedField(lambda g: g.flight.status, "status"),
            TrackedField(lambda g: g.flight.seat, "seat"),
            TrackedField(lambda g: g.flight.confirmed_date, "confirmed date"),
            TrackedField(lambda g: g.flight.training, "training"),
            TrackedField(lambda g: g.flight.paid, "paid"),
            TrackedField(lambda g: g.flight.training_see_doc, "training see doctor"),
            TrackedField(lambda g: g.flight.training_complete, "training complete"),
            TrackedField(lambda g: g.flight.waiver, "flight waiver received"),
            TrackedField(lambda g: g.flight.mediaWaiver, "media waiver received"),
            TrackedField(lambda g: g.flight.vaccinated, "vaccinated"),
            TrackedField(lambda g: g.flight.infection_test, "infection test"),
            TrackedField(lambda g: g.flight.nofly, "flight nofly"),
            TrackedField(lambda g: g.flight.exempt, "exempt"),
            TrackedField(lambda g: g.flight.booksOrdered, "books ordered"),
            TrackedField(lambda g: g.medical.release, "medical release received"),
            TrackedField(lambda g: g.medical.form, "medical form received"),
        ],
    ),
    HistoryTable(
        history=lambda g: g.call.history,
        fields=[
            TrackedField(lambda g: g.call.assigned_to, "assigned caller"),
            TrackedField(lambda g: g.call.fm_number, "FM #"),
            TrackedField(lambda g: g.call.email_sent, "guardian email sent"),
        ],
    ),
]

VETERAN_HISTORY_TABLES = [
    HistoryTable(
        history=lambda v: v.flight.history,
        fields=[
            TrackedField(lambda v: v.flight.id, "flight"),
            TrackedField(lambda v: v.flight.bus, "bus"),
            TrackedField(lambda v: v.flight.status, "status"),
            TrackedField(lambda v: v.flight.group, "group"),
            TrackedField(lambda v: v.flight.seat, "seat"),
            TrackedField(lambda v: v.flight.confirmed_date, "confirmed date"),
            TrackedField(lambda v: v.flight.nofly, "flight nofly"),
            TrackedField(lambda v: v.medical.release, "medical release received"),
            TrackedField(lambda v: v.medical.form, "medical form received"),
        ],
    ),
    HistoryTable(
        history=lambda v: v.call.history,
        fields=[
            TrackedField(lambda v: v.call.assigned_to, "assigned caller"),
            TrackedField(lambda v: v.call.fm_number, "FM #"),
            TrackedField(lambda v: v.call.mail_sent, "mail sent"),
            TrackedField(lambda v: v.call.email_sent, "email sent"),
        ],
    ),
]


class Participant(DocumentModel):
    """Fields shared by veterans and guardians."""

    KIND: ClassVar[str] = ""
    CHANGE_TEMPLATE: ClassVar[str] = GUARDIAN_CHANGE_TEMPLATE
    HISTORY_TABLES: ClassVar[list[HistoryTable]] = []

    id: str = Field(default="", alias="_id")
    rev: str = Field(default="", alias="_rev")
    type: str = ""
    name: Name = Field(default_factory=Name)
    address: Address = Field(default_factory=Address)
    medical: Medical = Field(default_factory=Medical)
    call: Call = Field(default_factory=Call)
    app_date: str = ""
    metadata: Metadata = Field(default_factory=Metadata)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Self:
        return cls.model_validate(doc)

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @property
    def full_name(self) -> str:
        return f"{self.name.first} {self.name.last}".strip()

    def prepare_for_save(self, user_name: str, timestamp: str | None = None) -> None:
        """Stamp update metadata; creation metadata is set only once."""
        timestamp = timestamp or utc_timestamp()
        self.metadata.updated_at = timestamp
        self.metadata.updated_by = user_name
        if not self.metadata.created_at:
            self.metadata.created_at = timestamp
            self.metadata.created_by = user_name

    def update_history(self, current: Participant, user_name: str, timestamp: str | None = None) -> list[HistoryEntry]:
        """Append history for each tracked field that differs from ``current``."""
        return record_changes(
            self.HISTORY_TABLES,
            current,
            self,
            user_name,
            timestamp or utc_timestamp(),
            self.CHANGE_TEMPLATE,
        )

    def assign_flight(self, flight_name: str, user_name: str, timestamp: str) -> None:
        """Move onto ``flight_name``, recording the prior flight in flight history."""
        flight = self.flight  # type: ignore[attr-defined]
        old_flight = flight.id or NO_FLIGHT
        flight.id = flight_name
        flight.history.append(
            HistoryEntry(
                timestamp=timestamp,
                change=FLIGHT_CHANGE_TEMPLATE.format(old=old_flight, new=flight_name, user=user_name),
            )
        )
        self.metadata.updated_at = timestamp
        self.metadata.updated_by = user_name


class Veteran(Participant):
    KIND: ClassVar[str] = VETERAN_TYPE
    CHANGE_TEMPLATE: ClassVar[str] = VETERAN_CHANGE_TEMPLATE
    HISTORY_TABLES: ClassVar[list[HistoryTable]] = VETERAN_HISTORY_TABLES

    flight: VeteranFlight = Field(default_factory=VeteranFlight)
    guardian: VeteranGuardianRef = Field(default_factory=VeteranGuardianRef)


class Guardian(Participant):
    KIND: ClassVar[str] = GUARDIAN_TYPE
    HISTORY_TABLES: ClassVar[list[HistoryTable]] = GUARDIAN_HISTORY_TABLES

    type: str = GUARDIAN_TYPE
    flight: GuardianFlight = Field(default_factory=GuardianFlight)
    veteran: GuardianVeteranRefs = Field(default_factory=GuardianVeteranRefs)

    @property
    def pairings(self) -> list[Pairing]:
        return self.veteran.pairings


