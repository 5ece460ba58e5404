"""Tests for audit history entries and tracked-field change detection."""

from __future__ import annotations

import re
from datetime import UTC, datetime

from honorflight.models.history import (
    GUARDIAN_CHANGE_TEMPLATE,
    TIMESTAMP_PATTERN,
    VETERAN_CHANGE_TEMPLATE,
    HistoryEntry,
    format_value,
    utc_timestamp,
)
from honorflight.models.participants import Guardian, Veteran


class TestTimestamp:
    def test_second_precision_with_trailing_z(self):
        stamp = utc_timestamp(datetime(2026, 3, 4, 5, 6, 7, 891011, tzinfo=UTC))
        assert stamp == "2026-03-04T05:06:07Z"

    def test_now_matches_pattern(self):
        assert re.match(TIMESTAMP_PATTERN, utc_timestamp())


class TestHistoryEntry:
    def test_stored_under_id_key(self):
        entry = HistoryEntry(timestamp="2026-01-01T00:00:00Z", change="changed bus from: None to: Alpha1 by: A B")
        assert entry.model_dump(by_alias=True) == {
            "id": "2026-01-01T00:00:00Z",
            "change": "changed bus from: None to: Alpha1 by: A B",
        }

    def test_reads_existing_data(self):
        entry = HistoryEntry.model_validate({"id": "2025-12-31T23:59:59Z", "change": "x", "legacy": 1})
        assert entry.timestamp == "2025-12-31T23:59:59Z"
        assert entry.model_dump(by_alias=True)["legacy"] == 1


class TestFormatValue:
    def test_booleans_render_lowercase(self):
        assert format_value(True) == "true"
        assert format_value(False) == "false"

    def test_none_and_numbers(self):
        assert format_value(None) == ""
        assert format_value(3.0) == "3"
        assert format_value(2) == "2"


class TestTemplates:
    def test_templates_differ_only_by_colons(self):
        kwargs = {"field": "bus", "old": "None", "new": "Alpha1", "user": "Pat Doe"}
        assert GUARDIAN_CHANGE_TEMPLATE.format(**kwargs) == "changed bus from: None to: Alpha1 by: Pat Doe"
        assert VETERAN_CHANGE_TEMPLATE.format(**kwargs) == "changed bus from None to Alpha1 by: Pat Doe"


class TestUpdateHistory:
    """Participant.update_history appends only for tracked fields that changed."""

    def test_guardian_flight_change_uses_colon_template(self):
        current = Guardian.from_document({"_id": "g1", "flight": {"id": "SSHF-Old", "bus": "Alpha1"}})
        updated = Guardian.from_document({"_id": "g1", "flight": {"id": "SSHF-New", "bus": "Alpha1"}})

        appended = updated.update_history(current, "Pat Doe", "2026-02-02T10:00:00Z")

        assert [e.change for e in appended] == ["changed flight from: SSHF-Old to: SSHF-New by: Pat Doe"]
        assert updated.flight.history == appended

    def test_veteran_change_uses_plain_template(self):
        current = Veteran.from_document({"_id": "v1", "type": "Veteran", "flight": {"seat": "12A"}})
        updated = Veteran.from_document({"_id": "v1", "type": "Veteran", "flight": {"seat": "14C"}})

        appended = updated.update_history(current, "Pat Doe", "2026-02-02T10:00:00Z")

        assert [e.change for e in appended] == ["changed seat from 12A to 14C by: Pat Doe"]

    def test_no_change_no_entry(self):
        doc = {"_id": "g1", "flight": {"id": "SSHF-Old", "paid": True}, "call": {"fm_number": "7"}}
        current = Guardian.from_document(doc)
        updated = Guardian.from_document(doc)

        assert updated.update_history(current, "Pat Doe") == []
        assert updated.flight.history == []
        assert updated.call.history == []

    def test_entries_land_in_their_own_history_array(self):
        current = Guardian.from_document({"_id": "g1", "call": {"assigned_to": "Sam"}, "medical": {"form": False}})
        updated = Guardian.from_document({"_id": "g1", "call": {"assigned_to": "Lee"}, "medical": {"form": True}})

        updated.update_history(current, "Pat Doe", "2026-02-02T10:00:00Z")

        assert [e.change for e in updated.call.history] == ["changed assigned caller from: Sam to: Lee by: Pat Doe"]
        assert [e.change for e in updated.flight.history] == [
            "changed medical form received from: false to: true by: Pat Doe"
        ]

    def test_existing_history_is_preserved(self):
        old_entry = {"id": "2025-01-01T00:00:00Z", "change": "changed flight from: None to: A by: X Y"}
        current = Guardian.from_document({"_id": "g1", "flight": {"id": "A", "history": [old_entry]}})
        updated = Guardian.from_document({"_id": "g1", "flight": {"id": "B", "history": [old_entry]}})

        updated.update_history(current, "Pat Doe", "2026-02-02T10:00:00Z")

        assert len(updated.flight.history) == 2
        assert updated.flight.history[0].change == old_entry["change"]
