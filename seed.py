"""Demo data for a fresh database."""

import logging
from datetime import date, datetime, timezone

from auth import hash_password
from matching import compute_overall_match_score
from schemas import PropertyCreate, PropertyViewCreate, TenantProfileCreate, UserCreate
from storage import Storage

logger = logging.getLogger(__name__)

SAMPLE_PROPERTIES = [
    {
        "title": "Luxury Apartment in Manhattan",
        "description": "Beautiful apartment in the heart of Manhattan with modern amenities.",
        "address": "123 E 72nd St",
        "city": "New York",
        "state": "NY",
        "zip_code": "10021",
        "price_per_month": 3200,
        "bedrooms": 2,
        "bathrooms": 2,
        "square_feet": 1200,
        "property_type": "apartment",
        "featured": True,
        "minimum_income": 96000,
        "minimum_credit_score": 700,
        "required_rental_history": 24,
        "required_employment_stability": 12,
    },
    {
        "title": "Brooklyn Heights Brownstone",
        "description": "Classic brownstone with modern updates in prime Brooklyn Heights.",
        "address": "45 Pierrepont St",
        "city": "Brooklyn",
        "state": "NY",
        "zip_code": "11201",
        "price_per_month": 4500,
        "bedrooms": 3,
        "bathrooms": 2.5,
        "square_feet": 1850,
        "property_type": "townhouse",
        "featured": True,
        "minimum_income": 135000,
        "minimum_credit_score": 720,
        "required_rental_history": 36,
        "required_employment_stability": 24,
    },
    {
        "title": "Tribeca Loft",
        "description": "Spacious loft in the trendy Tribeca neighborhood.",
        "address": "78 Franklin St",
        "city": "New York",
        "state": "NY",
        "zip_code": "10013",
        "price_per_month": 5800,
        "bedrooms": 2,
        "bathrooms": 2,
        "square_feet": 1750,
        "property_type": "loft",
        "featured": True,
        "minimum_income": 174000,
        "minimum_credit_score": 740,
        "required_rental_history": 24,
        "required_employment_stability": 24,
    },
]


def seed_sample_data(storage: Storage) -> bool:
    """Insert one tenant, one landlord, three listings and viewings. Skips a non-empty store."""
    if storage.get_user_by_username("tenant1") or storage.get_all_properties():
        return False

    tenant = storage.create_user(
        UserCreate(
            username="tenant1",
            password="password123",
            email="tenant1@example.com",
            full_name="Michael Johnson",
            user_type="tenant",
            phone="555-123-4567",
        ),
        hash_password("password123"),
    )
    landlord = storage.create_user(
        UserCreate(
            username="landlord1",
            password="password123",
            email="landlord1@example.com",
            full_name="Robert Williams",
            user_type="landlord",
            phone="555-987-6543",
        ),
        hash_password("password123"),
    )

    profile = storage.create_tenant_profile(
        TenantProfileCreate(
            user_id=tenant.id,
            income_verified=True,
            credit_score_verified=True,
            rental_history_verified=True,
            employment_verified=True,
            income_score=85,
            credit_score=72,
            rental_history_score=91,
            employment_score=88,
            verified_at=datetime.now(timezone.utc),
        )
    )

    notes = [
        "Very interested in this property",
        "Good location but slightly above budget",
        "Love the spacious layout",
    ]
    for data, note in zip(SAMPLE_PROPERTIES, notes):
        prop = storage.create_property(
            PropertyCreate(landlord_id=landlord.id, available_from=date.today(), **data)
        )
        storage.create_property_view(
            PropertyViewCreate(property_id=prop.id, tenant_id=tenant.id, notes=note),
            match_score=compute_overall_match_score(profile, prop),
        )

    logger.info("Seeded sample users, properties and viewings")
    return True
