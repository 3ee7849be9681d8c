"""
Unit tests for MappingSession (operator review of an auto-mapped upload).
"""

import pytest

from services.header_mapper import MappingSession
from models.field_mapping import SKIP
from exceptions import (
    SourceColumnNotFoundError,
    UnknownFieldError,
    FieldAlreadyMappedError,
    MappingIncompleteError,
)


HEADERS = ["First Name", "Last Name", "Student #", "Expiration Date", "Trespassed From", "Comments"]


@pytest.fixture
def session(catalog) -> MappingSession:
    """Upload where the school id column was not recognized."""
    return MappingSession(HEADERS, catalog)


class TestInitialState:

    def test_starts_from_auto_map(self, session):
        """Recognized headers are mapped, the rest skipped."""
        assert session.mapping == {
            "First Name": "first_name",
            "Last Name": "last_name",
            "Student #": SKIP,
            "Expiration Date": "expiration_date",
            "Trespassed From": "trespassed_from",
            "Comments": SKIP,
        }

    def test_reports_missing_required(self, session):
        assert [f.key for f in session.unmapped_required] == ["school_id"]
        assert session.can_confirm is False

    def test_mapping_property_is_a_copy(self, session):
        session.mapping["Student #"] = "school_id"

        assert session.mapping["Student #"] == SKIP


class TestAssign:

    def test_assign_resolves_missing_field(self, session):
        """Manual pick clears the block."""
        session.assign("Student #", "school_id")

        assert session.unmapped_required == []
        assert session.can_confirm is True

    def test_assign_to_skip_frees_field(self, session):
        session.assign("First Name", SKIP)

        assert session.claimed_by("first_name") is None
        assert "first_name" in [f.key for f in session.unmapped_required]

    def test_assign_field_held_by_other_column_raises(self, session):
        with pytest.raises(FieldAlreadyMappedError) as exc_info:
            session.assign("Comments", "first_name")

        assert exc_info.value.status_code == 409
        assert exc_info.value.details["claimed_by"] == "First Name"
        assert session.mapping["Comments"] == SKIP

    def test_reassign_same_field_to_same_column_is_allowed(self, session):
        session.assign("First Name", "first_name")

        assert session.mapping["First Name"] == "first_name"

    def test_move_field_after_freeing_it(self, session):
        """A field released by one column can be taken by another."""
        session.assign("First Name", SKIP)
        session.assign("Comments", "first_name")

        assert session.claimed_by("first_name") == "Comments"

    def test_unknown_field_raises(self, session):
        with pytest.raises(UnknownFieldError) as exc_info:
            session.assign("Comments", "shoe_size")

        assert exc_info.value.status_code == 422
        assert SKIP in exc_info.value.details["valid"]

    def test_unknown_column_raises(self, session):
        with pytest.raises(SourceColumnNotFoundError):
            session.assign("Not A Column", "notes")

    def test_assign_does_not_rerun_auto_map(self, session):
        """Skipping a column never triggers a new proposal for other columns."""
        session.assign("Last Name", SKIP)

        assert session.mapping["Comments"] == SKIP
        assert session.mapping["Student #"] == SKIP


class TestAvailableFields:

    def test_excludes_fields_claimed_elsewhere(self, session):
        keys = [f.key for f in session.available_fields("Comments")]

        assert "first_name" not in keys
        assert "school_id" in keys
        assert "notes" in keys

    def test_keeps_columns_own_field(self, session):
        keys = [f.key for f in session.available_fields("First Name")]

        assert "first_name" in keys
        assert "last_name" not in keys

    def test_preserves_catalog_order(self, session, catalog):
        keys = [f.key for f in session.available_fields("Comments")]
        catalog_keys = [f.key for f in catalog]

        assert keys == [k for k in catalog_keys if k in keys]

    def test_unknown_column_raises(self, session):
        with pytest.raises(SourceColumnNotFoundError):
            session.available_fields("Nope")


class TestConfirm:

    def test_confirm_blocked_while_required_missing(self, session):
        with pytest.raises(MappingIncompleteError) as exc_info:
            session.confirm()

        assert exc_info.value.status_code == 422
        assert exc_info.value.details["missing_required"] == ["School ID"]

    def test_confirm_drops_skip_entries(self, session):
        session.assign("Student #", "school_id")

        mapping = session.confirm()

        assert "Comments" not in mapping
        assert mapping["Student #"] == "school_id"
        assert len(mapping) == 5

    def test_to_result_reflects_overrides(self, session):
        session.assign("Comments", "notes")

        result = session.to_result()

        assert result.entries["Comments"].target_key == "notes"
        assert [f.key for f in result.unmapped_required] == ["school_id"]
