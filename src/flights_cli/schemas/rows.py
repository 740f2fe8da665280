"""
Ranked row schemas using Pandera.

Defines the presentation projection of a provider flight option and the
DataFrame contract the presenter filters and sorts. Schema validation
happens once, when rows are turned into a frame, not per operation.
"""

import sys
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple, Union

import pandera as pa
from pandera.typing import DataFrame, Series

from flights_cli.schemas.response import FlightResult

GROUPS: Tuple[str, ...] = ("best", "other")

# Sort key for rows without a price; always sorts after real prices.
MISSING_PRICE_SORT = sys.maxsize


def minutes_to_hm(minutes: int) -> str:
    """Format minutes as '<hours>h <minutes>m'."""
    hours, mins = divmod(int(minutes), 60)
    return f"{hours}h {mins}m"


@dataclass(frozen=True)
class RankedRow:
    """
    Immutable display row for one flight option.

    `group` and `rank` record where the provider put the option; sorting
    reorders rows but never rewrites either field.
    """

    group: str
    rank: int
    price: Union[int, float, str]
    price_sort: float
    duration: str
    duration_minutes: int
    stops: int
    depart: str
    arrive: str
    route: str
    airlines: str
    segments: str
    carrier_codes: Tuple[str, ...] = ()
    departure_token: Optional[str] = None

    @classmethod
    def from_flight(cls, flight: FlightResult, group: str, rank: int) -> "RankedRow":
        """
        Project a provider flight option into a row.

        Args:
            flight: Parsed provider flight option.
            group: Provider bucket ("best" or "other").
            rank: 1-based position inside that bucket.

        Returns:
            RankedRow with all derived display fields.
        """
        if group not in GROUPS:
            raise ValueError(f"group must be one of {GROUPS}, got {group!r}")
        if rank < 1:
            raise ValueError(f"rank must be >= 1, got {rank}")

        legs = flight.flights
        first_leg, last_leg = legs[0], legs[-1]
        airlines = ", ".join(dict.fromkeys(leg.airline for leg in legs))
        duration_minutes = flight.duration_minutes

        return cls(
            group=group,
            rank=rank,
            price=flight.price if flight.price is not None else "N/A",
            price_sort=flight.price if flight.price is not None else MISSING_PRICE_SORT,
            duration=minutes_to_hm(duration_minutes),
            duration_minutes=duration_minutes,
            stops=flight.stop_count,
            depart=first_leg.departure_airport.time,
            arrive=last_leg.arrival_airport.time,
            route=f"{first_leg.departure_airport.id} -> {last_leg.arrival_airport.id}",
            airlines=airlines,
            segments=" | ".join(leg.summary for leg in legs),
            carrier_codes=tuple(flight.carrier_codes),
            departure_token=flight.departure_token,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RankedRowSchema(pa.DataFrameModel):
    """
    Contract for the frame of ranked rows.

    Only the columns the filters and the sort read are declared; display
    columns (price, route, segments, ...) pass through unchanged.
    """

    group: Series[str] = pa.Field(
        isin=list(GROUPS),
        description="Provider bucket the option came from",
    )
    rank: Series[int] = pa.Field(
        ge=1,
        description="1-based position inside the provider bucket",
    )
    price_sort: Series[float] = pa.Field(
        ge=0,
        description="Numeric price, or sys.maxsize when the price is missing",
    )
    duration_minutes: Series[int] = pa.Field(
        ge=0,
        description="Total itinerary duration in minutes",
    )
    stops: Series[int] = pa.Field(
        ge=0,
        description="Number of legs minus one",
    )

    class Config:
        strict = False
        coerce = True
        unique = ["group", "rank"]
        name = "RankedRowSchema"
        description = "Flattened flight options ready for filtering and ranking"


RankedRowFrame = DataFrame[RankedRowSchema]
