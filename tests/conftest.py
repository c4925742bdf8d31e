"""
Shared test fixtures.

Tests never touch the network: the Supabase client is replaced with an
in-memory MockSupabaseClient that keeps inserted rows per table.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from datetime import datetime, timezone
from typing import Generator

from models.catalog import CustomerRecord, ProductRecord, SupplierRecord
from tests.factories import CustomerFactory, ProductFactory, SupplierFactory

# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: int = None):
        self.data = data if data is not None else []
        if count is not None:
            self.count = count
        elif isinstance(self.data, list):
            self.count = len(self.data)
        else:
            self.count = 1 if self.data else 0


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters are applied on execute() against the table's stored rows.
    """

    def __init__(self, client: "MockSupabaseClient", table_name: str):
        self._client = client
        self._table_name = table_name
        self._filters = []
        self._order = None
        self._limit = None
        self._range = None
        self._is_single = False
        self._inserted = None

    def select(self, *args, **kwargs):
        return self

    def insert(self, data):
        if isinstance(data, dict):
            data = [data]
        rows = []
        for item in data:
            row = dict(item)
            row.setdefault("id", f"row-{len(self._client.rows(self._table_name)) + len(rows) + 1}")
            row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
            rows.append(row)
        self._inserted = rows
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: str(row.get(column)) == str(value))
        return self

    def neq(self, column, value):
        self._filters.append(lambda row: str(row.get(column)) != str(value))
        return self

    def ilike(self, column, pattern):
        needle = pattern.strip("%").lower()
        self._filters.append(lambda row: needle in str(row.get(column) or "").lower())
        return self

    def in_(self, column, values):
        values = {str(v) for v in values}
        self._filters.append(lambda row: str(row.get(column)) in values)
        return self

    def single(self):
        self._is_single = True
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def range(self, start, end):
        self._range = (start, end)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        self._client.calls.append(self._table_name)

        error = self._client.errors.get(self._table_name)
        if error is not None:
            raise error

        if self._inserted is not None:
            self._client.rows(self._table_name).extend(self._inserted)
            return MockSupabaseResponse(data=[dict(r) for r in self._inserted])

        rows = [dict(r) for r in self._client.rows(self._table_name)]
        rows = [r for r in rows if all(f(r) for f in self._filters)]

        if self._order:
            column, desc = self._order
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=desc)
        if self._range:
            start, end = self._range
            rows = rows[start:end + 1]
        if self._limit is not None:
            rows = rows[:self._limit]

        if self._is_single:
            return MockSupabaseResponse(data=rows[0] if rows else None)
        return MockSupabaseResponse(data=rows)


class MockSupabaseTable:
    """Mock Supabase table; each operation starts a new query."""

    def __init__(self, client: "MockSupabaseClient", name: str):
        self._client = client
        self._name = name

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._client, self._name).select(*args, **kwargs)

    def insert(self, data):
        return MockSupabaseQuery(self._client, self._name).insert(data)


class MockSupabaseClient:
    """In-memory Supabase client."""

    def __init__(self):
        self._tables: dict[str, list[dict]] = {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[str] = []

    def set_table_data(self, table_name: str, data: list):
        """Configure the rows of a table."""
        self._tables[table_name] = [dict(r) for r in data]

    def set_table_error(self, table_name: str, error: Exception):
        """Make every query on a table raise."""
        self.errors[table_name] = error

    def rows(self, table_name: str) -> list[dict]:
        """Stored rows of a table (mutable)."""
        return self._tables.setdefault(table_name, [])

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        return MockSupabaseTable(self, name)


# ===================
# FIXTURES
# ===================

@pytest.fixture(autouse=True)
def clear_staging_cache():
    """Every test starts with an empty staging cache."""
    from services.staging_cache_service import clear_staging_cache as _clear
    _clear()
    yield
    _clear()


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("Customers", [
                {"id": 1, "CompanyName": "HeyTea", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Singleton services are reset so they bind to this test's client.
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase), \
         patch("services.catalog_service.get_supabase_client", return_value=mock_supabase), \
         patch("services.commit_service.get_supabase_client", return_value=mock_supabase), \
         patch("services.order_history_service.get_supabase_client", return_value=mock_supabase), \
         patch("services.catalog_service._catalog_service", None), \
         patch("services.commit_service._commit_service", None), \
         patch("services.order_history_service._order_history_service", None):
        yield mock_supabase


@pytest.fixture
def customer_rows() -> list[dict]:
    """Customers table rows: two HeyTea outlets and a cafe."""
    return [
        CustomerFactory.create(id=1, company_name="HeyTea", branch="Sunway Pyramid"),
        CustomerFactory.create(id=2, company_name="HeyTea", branch="Genting"),
        CustomerFactory.create(id=3, company_name="Kafe Daun", branch=None),
    ]


@pytest.fixture
def product_rows() -> list[dict]:
    """ProductMaster rows covering the usual fruit and vegetable lines."""
    return [
        ProductFactory.create(code="FR-MGS", name="Mango Gold Susu", base_uom="CTN"),
        ProductFactory.create(code="FR-AVO", name="Avocado", base_uom="PCS"),
        ProductFactory.create(code="VG-CAR", name="Carrot", base_uom="KG"),
        ProductFactory.create(code="VG-TOM", name="Tomato", base_uom="KG"),
        ProductFactory.create(code="VG-CTM", name="Cherry Tomato", base_uom="PKT"),
        ProductFactory.create(code="VG-KKG", name="Kangkung", base_uom="BKL"),
    ]


@pytest.fixture
def supplier_rows() -> list[dict]:
    """Suppliers table rows."""
    return [
        SupplierFactory.create(name="Ah Seng Trading"),
        SupplierFactory.create(name="Cameron Fresh Farm"),
    ]


@pytest.fixture
def customers(customer_rows) -> list[CustomerRecord]:
    return [CustomerRecord.from_row(r) for r in customer_rows]


@pytest.fixture
def products(product_rows) -> list[ProductRecord]:
    return [ProductRecord.from_row(r) for r in product_rows]


@pytest.fixture
def suppliers(supplier_rows) -> list[SupplierRecord]:
    return [SupplierRecord.from_row(r) for r in supplier_rows]


@pytest.fixture
def product_index(products) -> dict[str, ProductRecord]:
    return {p.code: p for p in products}


@pytest.fixture
def seeded_db(mock_db, customer_rows, product_rows, supplier_rows) -> MockSupabaseClient:
    """Mock database holding the catalog fixtures."""
    mock_db.set_table_data("Customers", customer_rows)
    mock_db.set_table_data("ProductMaster", product_rows)
    mock_db.set_table_data("Suppliers", supplier_rows)
    return mock_db


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(seeded_db):
    """
    Create FastAPI test client with a seeded mock database.

    Usage:
        def test_endpoint(test_client_with_mock_db, seeded_db):
            response = test_client_with_mock_db.post("/api/quick-paste/parse", json={...})
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
