"""
Provider response schemas using Pydantic.

Models the parts of the SerpAPI Google Flights payload the presenter
reads. Every top-level list and metadata block is optional, and unknown
fields are ignored so provider additions never break parsing.
"""

import re
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# "UA 1234", "B6 917", "UA1234" -> carrier code + number.
# Two leading digits never form a carrier code.
FLIGHT_NUMBER_RE = re.compile(r"^(?!\d{2})([A-Z0-9]{2})\s*(\d{1,4})$")


class AirportPoint(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str = ""
    time: str = ""


class FlightLeg(BaseModel):
    """A single flight segment between two airports, flown by one airline."""

    model_config = ConfigDict(extra="ignore")

    departure_airport: AirportPoint
    arrival_airport: AirportPoint
    duration: int = Field(0, ge=0, description="Leg duration in minutes")
    airline: str = ""
    flight_number: Optional[str] = None

    @property
    def carrier_code(self) -> Optional[str]:
        """IATA carrier code parsed from the flight number, if it has one."""
        if not self.flight_number:
            return None
        match = FLIGHT_NUMBER_RE.match(self.flight_number.strip().upper())
        return match.group(1) if match else None

    @property
    def summary(self) -> str:
        """Render as '<airline> <flight_number> <origin>-><destination>'."""
        carrier = f"{self.airline} {self.flight_number}" if self.flight_number else self.airline
        return f"{carrier} {self.departure_airport.id}->{self.arrival_airport.id}"


class FlightResult(BaseModel):
    """A complete itinerary option: one or more legs plus optional price."""

    model_config = ConfigDict(extra="ignore")

    flights: List[FlightLeg] = Field(..., min_length=1)
    price: Optional[Union[int, float]] = None
    total_duration: Optional[int] = Field(None, ge=0)
    departure_token: Optional[str] = None

    @property
    def stop_count(self) -> int:
        return max(len(self.flights) - 1, 0)

    @property
    def duration_minutes(self) -> int:
        """Provider total duration, else the sum of leg durations."""
        if self.total_duration is not None:
            return self.total_duration
        return sum(leg.duration for leg in self.flights)

    @property
    def carrier_codes(self) -> List[str]:
        """Distinct carrier codes across all legs, in encounter order."""
        seen: Dict[str, None] = {}
        for leg in self.flights:
            code = leg.carrier_code
            if code:
                seen.setdefault(code, None)
        return list(seen)


class SearchMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    status: Optional[str] = None
    google_flights_url: Optional[str] = None
    total_time_taken: Optional[float] = None


class GoogleFlightsResponse(BaseModel):
    """
    Top-level SerpAPI google_flights payload.

    Only used for reading; the raw dict is what gets printed by the
    `search` command, so this model never needs to round-trip.
    """

    model_config = ConfigDict(extra="ignore")

    best_flights: Optional[List[FlightResult]] = None
    other_flights: Optional[List[FlightResult]] = None
    search_metadata: Optional[SearchMetadata] = None
    search_parameters: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
