"""
Schema definitions for flights_cli.

Frozen dataclasses for requests and rows, Pydantic models for the
provider payload, and a Pandera contract for the ranked-row frame.
"""

from .request import (
    CABIN_CHOICES,
    SORT_CHOICES,
    STOP_CHOICES,
    ListOptions,
    RawListOptions,
    RawSearchOptions,
    SearchRequest,
)
from .response import (
    AirportPoint,
    FlightLeg,
    FlightResult,
    GoogleFlightsResponse,
    SearchMetadata,
)
from .rows import RankedRow, RankedRowFrame, RankedRowSchema

__all__ = [
    # Requests
    "CABIN_CHOICES",
    "SORT_CHOICES",
    "STOP_CHOICES",
    "RawSearchOptions",
    "RawListOptions",
    "SearchRequest",
    "ListOptions",
    # Provider payload
    "AirportPoint",
    "FlightLeg",
    "FlightResult",
    "GoogleFlightsResponse",
    "SearchMetadata",
    # Rows
    "RankedRow",
    "RankedRowFrame",
    "RankedRowSchema",
]
