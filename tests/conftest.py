"""Shared fixtures for flights_cli tests."""

from datetime import date
from typing import Any, Dict, List, Optional

import pytest

from flights_cli.config import Settings
from flights_cli.schemas.request import ListOptions, SearchRequest


def make_leg(
    origin: str,
    destination: str,
    airline: str = "United",
    flight_number: Optional[str] = "UA 100",
    duration: int = 120,
    depart: str = "2026-07-04 08:00",
    arrive: str = "2026-07-04 10:00",
) -> Dict[str, Any]:
    """Build one SerpAPI leg dict."""
    leg: Dict[str, Any] = {
        "departure_airport": {"id": origin, "name": f"{origin} Airport", "time": depart},
        "arrival_airport": {"id": destination, "name": f"{destination} Airport", "time": arrive},
        "duration": duration,
        "airline": airline,
    }
    if flight_number is not None:
        leg["flight_number"] = flight_number
    return leg


def make_flight(
    legs: List[Dict[str, Any]],
    price: Optional[float] = None,
    total_duration: Optional[int] = None,
    departure_token: Optional[str] = None,
) -> Dict[str, Any]:
    """Build one SerpAPI flight option dict."""
    flight: Dict[str, Any] = {"flights": legs}
    if price is not None:
        flight["price"] = price
    if total_duration is not None:
        flight["total_duration"] = total_duration
    if departure_token is not None:
        flight["departure_token"] = departure_token
    return flight


@pytest.fixture
def settings() -> Settings:
    return Settings(api_key="test-key")


@pytest.fixture
def fixed_today() -> date:
    """Reference 'today' for date inference tests."""
    return date(2025, 6, 1)


@pytest.fixture
def one_way_request() -> SearchRequest:
    return SearchRequest(origin="JFK", destination="LAX", outbound_date="2026-07-04")


@pytest.fixture
def round_trip_request() -> SearchRequest:
    return SearchRequest(
        origin="JFK",
        destination="LAX",
        outbound_date="2026-07-04",
        return_date="2026-07-11",
    )


@pytest.fixture
def default_options() -> ListOptions:
    return ListOptions()


@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    """
    Provider payload with 2 best and 3 other options.

    best #1: UA nonstop, $300, 330m
    best #2: DL 1-stop via ATL, $250, 420m
    other #1: AA nonstop, $500, 320m, with departure_token
    other #2: UA + AS 1-stop via SEA, no price, 500m (sum of legs)
    other #3: B6 2-stop, $180, 600m
    """
    return {
        "search_metadata": {
            "id": "abc123",
            "status": "Success",
            "google_flights_url": "https://www.google.com/travel/flights?q=JFK-LAX",
            "total_time_taken": 1.5,
        },
        "search_parameters": {"engine": "google_flights", "departure_id": "JFK"},
        "best_flights": [
            make_flight(
                [make_leg("JFK", "LAX", "United", "UA 100", 330)],
                price=300,
                total_duration=330,
            ),
            make_flight(
                [
                    make_leg("JFK", "ATL", "Delta", "DL 200", 150),
                    make_leg("ATL", "LAX", "Delta", "DL 201", 240),
                ],
                price=250,
                total_duration=420,
            ),
        ],
        "other_flights": [
            make_flight(
                [make_leg("JFK", "LAX", "American", "AA 1", 320)],
                price=500,
                total_duration=320,
                departure_token="tok-aa-1",
            ),
            make_flight(
                [
                    make_leg("JFK", "SEA", "United", "UA 300", 360),
                    make_leg("SEA", "LAX", "Alaska", "AS 400", 140),
                ],
            ),
            make_flight(
                [
                    make_leg("JFK", "BOS", "JetBlue", "B6 10", 60),
                    make_leg("BOS", "FLL", "JetBlue", "B6 11", 180),
                    make_leg("FLL", "LAX", "JetBlue", "B6 12", 330),
                ],
                price=180,
                total_duration=600,
            ),
        ],
    }


@pytest.fixture
def empty_payload() -> Dict[str, Any]:
    return {
        "search_metadata": {"id": "empty1", "status": "Success"},
        "best_flights": [],
        "other_flights": [],
    }


@pytest.fixture
def leg_factory():
    """Factory for SerpAPI leg dicts."""
    return make_leg


@pytest.fixture
def flight_factory():
    """Factory for SerpAPI flight option dicts."""
    return make_flight
