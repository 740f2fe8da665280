"""
Search request schemas.

Defines the raw (string-typed) option containers filled by the CLI and
the normalized, immutable request objects produced from them.
"""

import re
from dataclasses import dataclass
from typing import Literal, Optional, Tuple

CabinClass = Literal["economy", "premium-economy", "business", "first"]
SortField = Literal["price", "duration", "stops"]

CABIN_CHOICES: Tuple[str, ...] = ("economy", "premium-economy", "business", "first")
SORT_CHOICES: Tuple[str, ...] = ("price", "duration", "stops")
STOP_CHOICES: Tuple[int, ...] = (0, 1, 2, 3)

DEFAULT_LIMIT = 10

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
AIRLINE_CODE_RE = re.compile(r"^[A-Z0-9]{2}$")


@dataclass(frozen=True)
class RawSearchOptions:
    """Search options exactly as typed on the command line."""

    origin: str
    destination: str
    date: str
    return_date: Optional[str] = None
    adults: str = "1"
    children: str = "0"
    infants_in_seat: str = "0"
    infants_on_lap: str = "0"
    cabin: str = "economy"
    currency: str = "USD"
    hl: str = "en"
    gl: str = "us"
    max_price: Optional[str] = None
    airlines: Optional[str] = None
    exclude_airlines: Optional[str] = None
    stops: Optional[str] = None
    deep_search: bool = False


@dataclass(frozen=True)
class RawListOptions:
    """Table presentation options exactly as typed on the command line."""

    limit: str = str(DEFAULT_LIMIT)
    sort_by: str = "price"
    prefer_airline: Optional[str] = None
    prefer_nonstop: bool = False
    nonstop_only: bool = False
    show_token: bool = False


@dataclass(frozen=True)
class SearchRequest:
    """
    Immutable, normalized flight search request.

    Built by the input normalizer; every field is already canonical, so
    the provider client only has to encode it.

    Attributes:
        origin: Departure airport code (uppercase).
        destination: Arrival airport code (uppercase).
        outbound_date: Outbound date, YYYY-MM-DD.
        return_date: Return date, YYYY-MM-DD (None = one way).
        adults: Number of adult passengers.
        children: Number of child passengers.
        infants_in_seat: Number of infants with their own seat.
        infants_on_lap: Number of lap infants.
        cabin: Cabin class literal.
        currency: Currency code for prices.
        hl: Result language.
        gl: Result country.
        max_price: Maximum total price (None = unlimited).
        include_airlines: Distinct carrier codes to keep, in input order (None = no filter).
        exclude_airlines: Distinct carrier codes to drop, in input order (None = no filter).
        stops: Exact stop count to request (None = any).
        deep_search: Ask the provider for a slower, browser-identical search.
    """

    origin: str
    destination: str
    outbound_date: str
    return_date: Optional[str] = None
    adults: int = 1
    children: int = 0
    infants_in_seat: int = 0
    infants_on_lap: int = 0
    cabin: CabinClass = "economy"
    currency: str = "USD"
    hl: str = "en"
    gl: str = "us"
    max_price: Optional[int] = None
    include_airlines: Optional[Tuple[str, ...]] = None
    exclude_airlines: Optional[Tuple[str, ...]] = None
    stops: Optional[int] = None
    deep_search: bool = False

    def __post_init__(self) -> None:
        """Validate request invariants after initialization."""
        if not self.origin or not self.destination:
            raise ValueError("origin and destination cannot be empty")
        for name in ("outbound_date", "return_date"):
            value = getattr(self, name)
            if value is not None and not ISO_DATE_RE.match(value):
                raise ValueError(f"{name} must be YYYY-MM-DD, got {value!r}")
        for name in ("adults", "children", "infants_in_seat", "infants_on_lap"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.cabin not in CABIN_CHOICES:
            raise ValueError(f"cabin must be one of {CABIN_CHOICES}, got {self.cabin!r}")
        if self.max_price is not None and self.max_price < 0:
            raise ValueError(f"max_price must be >= 0, got {self.max_price}")
        if self.stops is not None and self.stops not in STOP_CHOICES:
            raise ValueError(f"stops must be one of {STOP_CHOICES}, got {self.stops}")
        for name in ("include_airlines", "exclude_airlines"):
            codes = getattr(self, name)
            if codes is None:
                continue
            if not codes:
                raise ValueError(f"{name} must be None instead of empty")
            bad = sorted(code for code in codes if not AIRLINE_CODE_RE.match(code))
            if bad:
                raise ValueError(f"{name} contains invalid carrier codes: {bad}")

    @property
    def is_round_trip(self) -> bool:
        """True when a return date was requested."""
        return self.return_date is not None


@dataclass(frozen=True)
class ListOptions:
    """
    Normalized presentation options for the ranked table.

    Attributes:
        limit: Maximum rows to print.
        sort_by: Primary ranking field.
        prefer_airline: Substring that ranks matching rows first.
        prefer_nonstop: Rank fewer stops first, before sort_by.
        nonstop_only: Drop every row with stops.
        show_token: Add the departure_token column.
    """

    limit: int = DEFAULT_LIMIT
    sort_by: SortField = "price"
    prefer_airline: Optional[str] = None
    prefer_nonstop: bool = False
    nonstop_only: bool = False
    show_token: bool = False

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"limit must be >= 1, got {self.limit}")
        if self.sort_by not in SORT_CHOICES:
            raise ValueError(f"sort_by must be one of {SORT_CHOICES}, got {self.sort_by!r}")
