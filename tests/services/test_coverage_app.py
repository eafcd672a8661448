"""Tests for the coverage desk API."""

import random

import pytest
from fastapi.testclient import TestClient

from jetlagged.coverage import CoverageBook
from jetlagged.services.coverage import build_app


@pytest.fixture
def client(settings):
    """Create test client for the coverage app."""
    book = CoverageBook(rng=random.Random(7))
    return TestClient(build_app(settings, book))


def test_quote(client):
    response = client.post("/coverage/quote", json={"outcome_type": "CANCEL", "coverage": 250})
    assert response.status_code == 200
    assert response.json() == {"yes_price": 0.17, "implied_probability": 17, "premium": 42.5}


def test_request_opens_then_routes(client):
    first = client.post(
        "/coverage/requests",
        json={"flight_number": " dl104 ", "departure_date": "2024-12-01", "coverage": 250},
    )
    assert first.status_code == 200
    assert first.json()["created"] is True
    assert first.json()["market"]["id"] == "DL104-2024-12-01"

    second = client.post(
        "/coverage/requests",
        json={"flight_number": "DL104", "departure_date": "2024-12-01", "coverage": 900},
    )
    assert second.json()["created"] is False
    assert "already an open delay market" in second.json()["message"]

    markets = client.get("/coverage/markets").json()
    assert [m["id"] for m in markets] == ["DL104-2024-12-01"]


def test_request_requires_flight_number(client):
    response = client.post(
        "/coverage/requests",
        json={"flight_number": "  ", "departure_date": "2024-12-01"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Please enter a flight number to continue."}


def test_markets_sorted_by_probability(client):
    client.post(
        "/coverage/requests",
        json={"flight_number": "UA881", "departure_date": "2024-12-02", "outcome_type": "CANCEL"},
    )
    client.post(
        "/coverage/requests",
        json={"flight_number": "AF008", "departure_date": "2024-12-03", "coverage": 5000},
    )
    markets = client.get("/coverage/markets").json()
    assert [m["flight_number"] for m in markets] == ["AF008", "UA881"]
    assert markets[0]["implied_probability"] == 26


def test_default_desk_lists_seed_markets(settings):
    client = TestClient(build_app(settings))

    markets = client.get("/coverage/markets").json()

    assert [m["flight_number"] for m in markets] == ["AF008", "DL104", "UA881"]
    assert [m["implied_probability"] for m in markets] == [29, 22, 17]
