"""Tests for password hashing and signed session tokens."""

from itsdangerous import URLSafeTimedSerializer

from auth import (
    authenticate,
    hash_password,
    make_session_token,
    read_session_token,
    verify_password,
)
from schemas import UserCreate


def test_password_hash_round_trip() -> None:
    hashed = hash_password("password123")
    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)


def test_session_token() -> None:
    token = make_session_token(7)
    assert read_session_token(token) == {"user_id": 7}


def test_expired_token() -> None:
    assert read_session_token(make_session_token(7), max_age_seconds=-1) is None


def test_foreign_token_rejected() -> None:
    forged = URLSafeTimedSerializer("someone-else", salt="rentmatch-session").dumps({"user_id": 1})
    assert read_session_token(forged) is None
    assert read_session_token("not-a-token") is None


def test_authenticate(storage) -> None:
    user = storage.create_user(
        UserCreate(
            username="tenant1",
            password="password123",
            email="tenant1@example.com",
            full_name="Michael Johnson",
            user_type="tenant",
        ),
        hash_password("password123"),
    )

    assert authenticate(storage, "tenant1", "password123").id == user.id
    assert authenticate(storage, "tenant1", "nope") is None
    assert authenticate(storage, "ghost", "password123") is None
