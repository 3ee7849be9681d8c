"""
Unit tests for RecordUploadService.

Run: pytest tests/unit/test_record_upload_service.py -v
"""

import pytest
from unittest.mock import MagicMock, patch

from services.record_upload_service import RecordUploadService
from models.trespass_record import TrespassRecordCreate
from exceptions import (
    ProfileNotFoundError,
    TenantMissingError,
    UploadPermissionError,
    RecordUploadError,
    DatabaseError,
)

from tests.factories import UploadRowFactory


def make_records(count: int) -> list[TrespassRecordCreate]:
    return [TrespassRecordCreate(**row) for row in UploadRowFactory.create_batch(count)]


class TestResolveTenant:
    """Tests for RecordUploadService.resolve_tenant()"""

    def test_home_tenant_used_by_default(self, mock_db, mock_supabase, district_admin_profile):
        mock_supabase.set_table_data("user_profiles", [district_admin_profile])
        service = RecordUploadService()

        assert service.resolve_tenant("user-1") == "tenant-1"

    def test_active_tenant_wins_for_switched_master_admin(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("user_profiles", [{
            "role": "master_admin",
            "tenant_id": "tenant-1",
            "active_tenant_id": "tenant-9",
        }])
        service = RecordUploadService()

        assert service.resolve_tenant("user-1") == "tenant-9"

    def test_missing_profile_raises(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("user_profiles", [])
        service = RecordUploadService()

        with pytest.raises(ProfileNotFoundError) as exc_info:
            service.resolve_tenant("ghost")

        assert exc_info.value.status_code == 404

    def test_profile_without_tenant_raises(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("user_profiles", [{
            "role": "district_admin",
            "tenant_id": None,
            "active_tenant_id": None,
        }])
        service = RecordUploadService()

        with pytest.raises(TenantMissingError) as exc_info:
            service.resolve_tenant("user-1")

        assert exc_info.value.status_code == 403

    @pytest.mark.parametrize("role", ["user", "viewer", None])
    def test_role_without_upload_rights_raises(self, mock_db, mock_supabase, role):
        mock_supabase.set_table_data("user_profiles", [{
            "role": role,
            "tenant_id": "tenant-1",
            "active_tenant_id": None,
        }])
        service = RecordUploadService()

        with pytest.raises(UploadPermissionError) as exc_info:
            service.resolve_tenant("user-1")

        assert exc_info.value.code == "UPLOAD_NOT_PERMITTED"

    def test_profile_query_failure_wrapped(self):
        client = MagicMock()
        client.table.return_value.select.side_effect = Exception("connection reset")

        with patch("services.record_upload_service.get_supabase_client", return_value=client):
            service = RecordUploadService()
            with pytest.raises(DatabaseError):
                service.get_profile("user-1")


class TestUploadRecords:
    """Tests for RecordUploadService.upload_records()"""

    def test_new_records_inserted(self, mock_db, mock_supabase, district_admin_profile):
        mock_supabase.set_table_data("user_profiles", [district_admin_profile])
        mock_supabase.set_table_data("trespass_records", [])
        service = RecordUploadService()

        summary = service.upload_records("user-1", make_records(3))

        assert summary.inserted == 3
        assert summary.updated == 0
        assert summary.count == 3

        inserted = mock_supabase.writes("insert")
        assert len(inserted) == 3
        assert inserted[0]["tenant_id"] == "tenant-1"
        assert inserted[0]["user_id"] == "user-1"
        assert inserted[0]["status"] == "active"

    def test_existing_school_id_updated(self, mock_db, mock_supabase, district_admin_profile):
        mock_supabase.set_table_data("user_profiles", [district_admin_profile])
        mock_supabase.set_table_data("trespass_records", [{"id": "record-1"}])
        service = RecordUploadService()

        summary = service.upload_records("user-1", make_records(2))

        assert summary.updated == 2
        assert summary.inserted == 0
        updates = mock_supabase.writes("update")
        assert "updated_at" in updates[0]
        assert updates[0]["tenant_id"] == "tenant-1"

    def test_permission_checked_before_any_write(self, mock_db, mock_supabase):
        mock_supabase.set_table_data("user_profiles", [{
            "role": "user",
            "tenant_id": "tenant-1",
            "active_tenant_id": None,
        }])
        service = RecordUploadService()

        with pytest.raises(UploadPermissionError):
            service.upload_records("user-1", make_records(1))

        assert mock_supabase.operations == []

    def test_failed_records_collected(self, district_admin_profile):
        """Every record is attempted; failures are raised together afterwards."""
        client = MagicMock()
        profiles = MagicMock()
        profiles.select.return_value.eq.return_value.execute.return_value.data = [
            district_admin_profile
        ]
        records_table = MagicMock()
        lookup = records_table.select.return_value.is_.return_value.eq.return_value.eq.return_value
        lookup.limit.return_value.execute.return_value.data = []
        records_table.insert.return_value.execute.side_effect = [
            MagicMock(),
            Exception("duplicate key"),
            MagicMock(),
        ]
        client.table.side_effect = lambda name: profiles if name == "user_profiles" else records_table

        with patch("services.record_upload_service.get_supabase_client", return_value=client):
            service = RecordUploadService()
            records = make_records(3)

            with pytest.raises(RecordUploadError) as exc_info:
                service.upload_records("user-1", records)

        error = exc_info.value
        assert error.details["inserted"] == 2
        assert len(error.details["errors"]) == 1
        assert records[1].school_id in error.details["errors"][0]
        assert "duplicate key" in error.message
