"""Pytest configuration and fixtures."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from main import app, get_storage
from schemas import Property, PropertyCreate, TenantProfile, UserCreate
from storage import SqliteStorage


@pytest.fixture
def storage(tmp_path) -> SqliteStorage:
    """Fresh SQLite-backed storage per test."""
    return SqliteStorage(tmp_path / "rentmatch-test.db").init()


@pytest.fixture
def client(storage):
    app.dependency_overrides[get_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def landlord(storage):
    return storage.create_user(
        UserCreate(
            username="landlord1",
            password="password123",
            email="landlord1@example.com",
            full_name="Robert Williams",
            user_type="landlord",
        ),
        "not-a-real-hash",
    )


@pytest.fixture
def tenant(storage):
    return storage.create_user(
        UserCreate(
            username="tenant1",
            password="password123",
            email="tenant1@example.com",
            full_name="Michael Johnson",
            user_type="tenant",
        ),
        "not-a-real-hash",
    )


def property_data(landlord_id: int = 1, **overrides) -> dict:
    data = {
        "landlord_id": landlord_id,
        "title": "Luxury Apartment in Manhattan",
        "description": "Beautiful apartment with modern amenities.",
        "address": "123 E 72nd St",
        "city": "New York",
        "state": "NY",
        "zip_code": "10021",
        "price_per_month": 3200,
        "bedrooms": 2,
        "bathrooms": 2,
        "square_feet": 1200,
        "property_type": "apartment",
        "available_from": "2026-11-01",
        "featured": True,
        "minimum_income": 96000,
        "minimum_credit_score": 700,
        "required_rental_history": 24,
        "required_employment_stability": 12,
    }
    data.update(overrides)
    return data


def make_property(id: int = 1, **overrides) -> Property:
    """Unsaved property record for pure engine tests."""
    data = property_data(**overrides)
    data["available_from"] = date(2026, 11, 1)
    return Property(id=id, created_at="2026-10-01T00:00:00", updated_at="2026-10-01T00:00:00", **data)


def make_profile(**scores) -> TenantProfile:
    return TenantProfile(
        id=1,
        user_id=1,
        created_at="2026-10-01T00:00:00",
        updated_at="2026-10-01T00:00:00",
        **scores,
    )


def create_property(storage, landlord_id: int, **overrides) -> Property:
    return storage.create_property(PropertyCreate(**property_data(landlord_id, **overrides)))
