"""Tests for the exception-to-response mapping."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
    RentMatchError,
    general_exception_handler,
    rentmatch_exception_handler,
)


@pytest.fixture
def error_client():
    app = FastAPI()
    app.add_exception_handler(RentMatchError, rentmatch_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    errors = {
        "missing": NotFoundError("Property not found"),
        "invalid": InvalidInputError("annual_income must be greater than 0"),
        "conflict": ConflictError("Username already exists"),
        "service": RentMatchError("storage unavailable"),
        "crash": KeyError("x"),
    }

    @app.get("/raise/{name}")
    def raise_error(name: str):
        raise errors[name]

    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.parametrize(
    "name, status, message",
    [
        ("missing", 404, "Property not found"),
        ("invalid", 400, "annual_income must be greater than 0"),
        ("conflict", 400, "Username already exists"),
        ("service", 500, "storage unavailable"),
        ("crash", 500, "Internal server error"),
    ],
)
def test_status_mapping(error_client, name, status, message) -> None:
    resp = error_client.get(f"/raise/{name}")
    assert resp.status_code == status
    assert resp.json() == {"message": message}


def test_invalid_input_is_a_value_error() -> None:
    assert issubclass(InvalidInputError, ValueError)
