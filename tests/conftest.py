"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

import pytest
from unittest.mock import patch
from datetime import date
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

    def __init__(self, table: "MockSupabaseTable"):
        self._table = table
        self._data = list(table.rows)

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        if self._table.fail_inserts:
            raise RuntimeError("insert rejected")
        if isinstance(data, dict):
            data = [data]
        for item in data:
            self._table.rows.append({"id": f"test-uuid-{len(self._table.rows) + 1}", **item})
        self._data = data
        return self

    def eq(self, column, value):
        return self

    def limit(self, count):
        return self

    def execute(self) -> MockSupabaseResponse:
        return MockSupabaseResponse(data=self._data)


class MockSupabaseTable:
    """Mock Supabase table that records inserted rows."""

    def __init__(self):
        self.rows: list[dict] = []
        self.fail_inserts = False

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self).select(*args, **kwargs)

    def insert(self, data):
        return MockSupabaseQuery(self).insert(data)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def table(self, name: str) -> MockSupabaseTable:
        """Get (or create) mock table."""
        return self._tables.setdefault(name, MockSupabaseTable())

    def inserted(self, name: str) -> list[dict]:
        """Rows inserted into a table so far."""
        return self.table(name).rows


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_db, mock_supabase):
            ...
            assert mock_supabase.inserted("medications")
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Any code using get_supabase_client() gets the mock.
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.import_service.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def today() -> date:
    """Fixed reference date so expiry detection does not follow the clock."""
    return date(2025, 6, 15)


@pytest.fixture
def medication_headers() -> list[str]:
    """Headers of a typical pharmacy stock sheet."""
    return ["Drug Name", "Batch No", "Exp Date", "Cost Price", "S.Price", "Qty", "Shelf", "Remarks"]


@pytest.fixture
def medication_rows() -> list[dict]:
    """Rows matching medication_headers."""
    return [
        {
            "Drug Name": "Paracetamol 500mg",
            "Batch No": "PCM2301",
            "Exp Date": "2026-03-01",
            "Cost Price": "₦1,200.00",
            "S.Price": "1500",
            "Qty": "100",
            "Shelf": "A3",
            "Remarks": "fast mover",
        },
        {
            "Drug Name": "Amoxicillin 250mg",
            "Batch No": "AMX5512",
            "Exp Date": "15/08/2026",
            "Cost Price": "2000",
            "S.Price": "2500",
            "Qty": "40",
            "Shelf": "B1",
            "Remarks": "",
        },
    ]


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/imports/parse-line", json={...})
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)


@pytest.fixture
def test_client_with_mock_db(mock_supabase):
    """Create FastAPI test client with mocked database."""
    from fastapi.testclient import TestClient
    from main import app

    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.import_service.get_supabase_client", return_value=mock_supabase):
            with patch("services.import_service._import_service", None):
                yield TestClient(app)
