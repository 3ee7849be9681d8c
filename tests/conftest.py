"""
Shared test fixtures.

Settings need Supabase credentials at import time; dummy values are set
before any application module is imported.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from unittest.mock import patch
from datetime import datetime
from typing import Generator

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, table: str, log: list, data: list = None, count: int = None):
        self._table = table
        self._log = log
        self._data = data or []
        self._count = count

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        # Simulate insert - add id and timestamps
        if isinstance(data, dict):
            data = [data]
        for item in data:
            item["id"] = "test-uuid-123"
            item["created_at"] = datetime.utcnow().isoformat() + "Z"
            item["updated_at"] = datetime.utcnow().isoformat() + "Z"
            self._log.append(("insert", self._table, item))
        self._data = data
        return self

    def update(self, data):
        # Simulate update - merge with existing data
        self._log.append(("update", self._table, data))
        updated_data = []
        for item in self._data:
            merged = {**item, **data}
            merged["updated_at"] = datetime.utcnow().isoformat() + "Z"
            updated_data.append(merged)
        self._data = updated_data if updated_data else [data]
        return self

    def eq(self, column, value):
        return self

    def is_(self, column, value):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(
            data=self._data,
            count=self._count if self._count is not None else len(self._data)
        )


class MockSupabaseTable:
    """Mock Supabase table with configurable responses."""

    def __init__(self, name: str, log: list, data: list = None, count: int = None):
        self._name = name
        self._log = log
        self._data = data or []
        self._count = count

    def _query(self) -> MockSupabaseQuery:
        return MockSupabaseQuery(self._name, self._log, self._data.copy(), self._count)

    def select(self, *args, **kwargs):
        return self._query()

    def insert(self, data):
        return self._query().insert(data)

    def update(self, data):
        # For update, pass the existing data so it can be merged
        return self._query().update(data)


class MockSupabaseClient:
    """Mock Supabase client. Writes are recorded in `operations`."""

    def __init__(self):
        self._tables = {}
        self.operations: list[tuple[str, str, dict]] = []

    def set_table_data(self, table_name: str, data: list, count: int = None):
        """Configure mock data for a table."""
        self._tables[table_name] = {"data": data, "count": count}

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        config = self._tables.get(name, {"data": [], "count": None})
        return MockSupabaseTable(name, self.operations, config["data"], config["count"])

    def writes(self, kind: str, table: str = "trespass_records") -> list[dict]:
        """Payloads of every insert or update against a table."""
        return [payload for op, name, payload in self.operations if op == kind and name == table]


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("user_profiles", [
                {"role": "district_admin", "tenant_id": "tenant-1", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Usage:
        def test_something(mock_db, mock_supabase):
            mock_supabase.set_table_data("trespass_records", [...])
            # Now any code using get_supabase_client() gets the mock
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.record_upload_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture(autouse=True)
def clear_import_sessions() -> Generator:
    """Every test starts with an empty session store."""
    from services import import_session_service

    import_session_service.clear_sessions()
    yield
    import_session_service.clear_sessions()


@pytest.fixture
def catalog():
    """The trespass record import catalog."""
    from config.import_fields import TRESPASS_RECORD_FIELDS

    return TRESPASS_RECORD_FIELDS


@pytest.fixture
def district_admin_profile() -> dict:
    """Profile allowed to upload into tenant-1."""
    return {
        "role": "district_admin",
        "tenant_id": "tenant-1",
        "active_tenant_id": None,
    }


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/imports/fields")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def test_client_with_mock_db(mock_supabase):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("user_profiles", [...])
            response = test_client_with_mock_db.post(...)
    """
    from fastapi.testclient import TestClient
    from main import app
    from services.record_upload_service import RecordUploadService

    with patch("services.record_upload_service.get_supabase_client", return_value=mock_supabase):
        service = RecordUploadService()
        with patch("routes.imports.get_record_upload_service", return_value=service):
            yield TestClient(app)
