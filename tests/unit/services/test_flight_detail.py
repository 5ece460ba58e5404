"""Tests for grouping flight_pairings rows by guardian and counting bus riders."""

from __future__ import annotations

from typing import Any

import pytest

from honorflight.models.flight_detail import (
    VALID_BUSES,
    FlightDetailPair,
    FlightDetailPerson,
    normalize_bus,
    parse_detail_confirmed,
)
from honorflight.services.view_aggregator import build_detail_pairs, calculate_bus_stats
from honorflight.store.documents import ViewRow


def detail_row(person_id: str, kind: str = "Veteran", bus: Any = "Alpha1", pairing: str = "", **extra: Any) -> ViewRow:
    order = 1 if kind == "Guardian" else 0
    return ViewRow(
        key=["SSHF-Test01", person_id, order],
        value={"type": kind, "id": person_id, "bus": bus, "pairing": pairing, **extra},
        id=person_id,
    )


def person(person_id: str, bus: str = "Alpha1", nofly: bool = False) -> FlightDetailPerson:
    return FlightDetailPerson(type="Veteran", id=person_id, bus=bus, nofly=nofly)


class TestFlightDetailPerson:
    def test_valid_buses(self):
        assert VALID_BUSES == (
            "None",
            "Alpha1",
            "Alpha2",
            "Alpha3",
            "Alpha4",
            "Alpha5",
            "Bravo1",
            "Bravo2",
            "Bravo3",
            "Bravo4",
            "Bravo5",
        )

    @pytest.mark.parametrize("value", ["Charlie1", "", None, 3])
    def test_unknown_bus_normalized_to_none(self, value):
        assert normalize_bus(value) == "None"

    def test_bus_is_trimmed(self):
        assert normalize_bus(" Bravo2 ") == "Bravo2"

    @pytest.mark.parametrize(
        "value, expected",
        [("", True), ("confirmed", True), (True, True), ("unconfirmed", False), (None, False)],
    )
    def test_confirmed_flag(self, value, expected):
        assert parse_detail_confirmed(value) is expected

    def test_veteran_fields(self):
        veteran = FlightDetailPerson.from_view_value(
            {"type": "Veteran", "id": "v1", "seat": 12, "nofly": "nofly", "med_limits": "cane", "group": "10"}
        )

        assert veteran.seat == "12"
        assert veteran.nofly is True
        dumped = veteran.model_dump(exclude_none=True)
        assert dumped["med_limits"] == "cane"
        assert dumped["group"] == "10"
        assert "training" not in dumped

    def test_guardian_fields(self):
        guardian = FlightDetailPerson.from_view_value(
            {"type": "Guardian", "id": "g1", "training": "Online", "training_complete": "TRUE"}
        )

        dumped = guardian.model_dump(exclude_none=True)
        assert dumped["training_complete"] is True
        assert dumped["med_exprnc"] == ""
        assert "med_limits" not in dumped


class TestBuildDetailPairs:
    def test_paired_veteran_grouped_under_guardian(self):
        pairs = build_detail_pairs(
            [detail_row("v1", pairing="g1"), detail_row("g1", "Guardian", pairing="v1")]
        )

        assert len(pairs) == 1
        assert pairs[0].pair_id == "g1"
        assert [p.id for p in pairs[0].people] == ["v1", "g1"]
        assert pairs[0].missing_paired_person is False
        assert pairs[0].bus_mismatch is False

    def test_guardian_with_two_veterans_appears_once(self):
        pairs = build_detail_pairs(
            [
                detail_row("v1", pairing="g1"),
                detail_row("v2", pairing="g1"),
                detail_row("g1", "Guardian", pairing="v1"),
                detail_row("g1", "Guardian", pairing="v2"),
            ]
        )

        assert len(pairs) == 1
        assert [p.id for p in pairs[0].people] == ["v1", "v2", "g1"]

    def test_bus_mismatch_across_group(self):
        pairs = build_detail_pairs(
            [
                detail_row("v1", pairing="g1"),
                detail_row("v2", bus="Bravo2", pairing="g1"),
                detail_row("g1", "Guardian", pairing="v1"),
            ]
        )

        assert pairs[0].bus_mismatch is True

    def test_veteran_whose_guardian_is_off_flight(self):
        pairs = build_detail_pairs([detail_row("v1", pairing="g-elsewhere")])

        assert pairs[0].pair_id == "v1"
        assert pairs[0].missing_paired_person is True

    def test_guardian_whose_veteran_is_off_flight(self):
        pairs = build_detail_pairs([detail_row("g1", "Guardian", pairing="v-elsewhere")])

        assert pairs[0].pair_id == "g1"
        assert pairs[0].missing_paired_person is True

    def test_unpaired_veteran_is_not_missing_anyone(self):
        pairs = build_detail_pairs([detail_row("v1")])

        assert pairs[0].pair_id == "v1"
        assert pairs[0].missing_paired_person is False

    def test_order_is_groups_then_lone_guardians_then_lone_veterans(self):
        pairs = build_detail_pairs(
            [
                detail_row("v0"),
                detail_row("g9", "Guardian"),
                detail_row("v2", pairing="g2"),
                detail_row("g2", "Guardian", pairing="v2"),
                detail_row("v1", pairing="g1"),
                detail_row("g1", "Guardian", pairing="v1"),
            ]
        )

        assert [p.pair_id for p in pairs] == ["g2", "g1", "g9", "v0"]

    def test_empty(self):
        assert build_detail_pairs([]) == []


class TestCalculateBusStats:
    def test_counts_distinct_people_per_bus_and_tour(self):
        pairs = [
            FlightDetailPair(pair_id="g1", people=[person("v1"), person("g1")]),
            FlightDetailPair(pair_id="g2", people=[person("v2", "Bravo3"), person("g2", "Bravo3", nofly=True)]),
            FlightDetailPair(pair_id="v3", people=[person("v3", "None")]),
            # A person listed twice counts once
            FlightDetailPair(pair_id="v1", people=[person("v1")]),
        ]

        stats = calculate_bus_stats(pairs)

        assert stats.buses["Alpha1"] == 2
        assert stats.buses["Bravo3"] == 2
        assert stats.buses["None"] == 1
        assert stats.buses["Alpha2"] == 0
        assert stats.tours == {"Alpha": 2, "Bravo": 2, "None": 1}
        assert stats.flight == {"Alpha": 2, "Bravo": 1, "None": 1}

    def test_empty(self):
        stats = calculate_bus_stats([])

        assert set(stats.buses) == set(VALID_BUSES)
        assert sum(stats.buses.values()) == 0
        assert stats.tours == {"Alpha": 0, "Bravo": 0, "None": 0}
