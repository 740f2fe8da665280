"""
Input Normalizer - turns raw CLI strings into a validated request.

Every check here runs before any network activity, and every failure
raises a ValidationError naming the offending field.
"""

import logging
import re
from datetime import date, datetime, timezone
from typing import Dict, Optional, Tuple

from flights_cli.exceptions import InvalidChoiceError, UnknownAirlineError, ValidationError
from flights_cli.schemas.request import (
    CABIN_CHOICES,
    DEFAULT_LIMIT,
    SORT_CHOICES,
    STOP_CHOICES,
    ListOptions,
    RawListOptions,
    RawSearchOptions,
    SearchRequest,
)

logger = logging.getLogger(__name__)

ISO_INPUT_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
MONTH_DAY_RE = re.compile(r"^(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?$")
INTEGER_RE = re.compile(r"^\d+$")
CARRIER_TOKEN_RE = re.compile(r"^[A-Za-z0-9]{2}$")

AIRLINE_NAME_TO_CODE: Dict[str, str] = {
    "united": "UA",
    "delta": "DL",
    "american": "AA",
    "southwest": "WN",
    "alaska": "AS",
    "jetblue": "B6",
    "frontier": "F9",
    "spirit": "NK",
    "hawaiian": "HA",
}


def utc_today() -> date:
    """Current calendar date in UTC."""
    return datetime.now(timezone.utc).date()


# -------------------------------
# Dates
# -------------------------------


def parse_date_input(value: str, field: str, today: Optional[date] = None) -> str:
    """
    Parse a flexible date into YYYY-MM-DD.

    Accepts `YYYY-MM-DD` or `M/D[/YY|YYYY]`. Years below 100 are taken
    as 20xx. Without a year, the current UTC year is used unless that
    date is already in the past, in which case the next year is used.

    Args:
        value: Raw user input.
        field: Option name used in error messages.
        today: Reference date (UTC). Defaults to the current UTC date.

    Returns:
        Canonical YYYY-MM-DD string.

    Raises:
        ValidationError: On malformed input or a non-existent date.

    Examples:
        >>> parse_date_input("1/15", "date", today=date(2025, 6, 1))
        '2026-01-15'
        >>> parse_date_input("12/15/26", "date")
        '2026-12-15'
    """
    trimmed = value.strip()

    iso = ISO_INPUT_RE.match(trimmed)
    if iso:
        try:
            return date(int(iso.group(1)), int(iso.group(2)), int(iso.group(3))).isoformat()
        except ValueError:
            raise ValidationError(field, f"{field}: invalid date") from None

    md = MONTH_DAY_RE.match(trimmed)
    if not md:
        raise ValidationError(field, f"{field} must be YYYY-MM-DD or M/D[/YYYY]")

    month = int(md.group(1))
    day = int(md.group(2))
    year_from_input = int(md.group(3)) if md.group(3) else None

    if not 1 <= month <= 12:
        raise ValidationError(field, f"{field}: invalid month")
    if not 1 <= day <= 31:
        raise ValidationError(field, f"{field}: invalid day")

    today = today or utc_today()

    if year_from_input is None:
        year = today.year
    elif year_from_input < 100:
        year = year_from_input + 2000
    else:
        year = year_from_input

    try:
        candidate = date(year, month, day)
    except ValueError:
        raise ValidationError(field, f"{field}: invalid date") from None

    if year_from_input is None and candidate < today:
        try:
            candidate = date(year + 1, month, day)
        except ValueError:
            # Feb 29 that has passed this leap year has no next-year twin
            raise ValidationError(field, f"{field}: invalid date") from None
        logger.debug("%s %r has passed this year, using %s", field, value, candidate)

    return candidate.isoformat()


# -------------------------------
# Scalars and enums
# -------------------------------


def to_non_negative_int(value: str, name: str) -> int:
    """Parse a non-negative integer or raise ValidationError."""
    trimmed = str(value).strip()
    if not INTEGER_RE.match(trimmed) or not trimmed.isascii():
        raise ValidationError(name, f"{name} must be a non-negative integer")
    return int(trimmed)


def parse_cabin(value: str) -> str:
    if value not in CABIN_CHOICES:
        raise InvalidChoiceError("cabin", CABIN_CHOICES)
    return value


def parse_sort_by(value: str) -> str:
    if value not in SORT_CHOICES:
        raise InvalidChoiceError("sort-by", SORT_CHOICES)
    return value


def parse_stops(value: Optional[str]) -> Optional[int]:
    """Parse the stop-count filter; empty means no filter."""
    if value is None or not value.strip():
        return None

    trimmed = value.strip()
    if not INTEGER_RE.match(trimmed) or int(trimmed) not in STOP_CHOICES:
        raise InvalidChoiceError("stops", STOP_CHOICES)
    return int(trimmed)


# -------------------------------
# Airlines
# -------------------------------


def normalize_airline_code(token: str) -> str:
    """
    Normalize an airline token to its 2-character IATA code.

    2-character alphanumeric tokens are taken as codes; anything else is
    looked up (case-insensitively) in AIRLINE_NAME_TO_CODE.

    Examples:
        >>> normalize_airline_code("ua")
        'UA'
        >>> normalize_airline_code("JetBlue")
        'B6'
    """
    trimmed = token.strip()
    if not trimmed:
        raise ValidationError("airlines", "airline value cannot be empty")

    if CARRIER_TOKEN_RE.match(trimmed):
        return trimmed.upper()

    mapped = AIRLINE_NAME_TO_CODE.get(trimmed.lower())
    if mapped:
        return mapped

    raise UnknownAirlineError(trimmed)


def parse_airline_list(value: Optional[str]) -> Optional[Tuple[str, ...]]:
    """
    Parse a comma-separated airline list into distinct codes.

    Duplicates (after normalization) are dropped, keeping first-seen
    order. An absent or empty value means "no filter" and returns None.
    """
    if not value:
        return None

    codes = dict.fromkeys(normalize_airline_code(item) for item in value.split(","))
    return tuple(codes) or None


# -------------------------------
# Request builders
# -------------------------------


def _airport(value: str, field: str) -> str:
    code = value.strip().upper()
    if not code:
        raise ValidationError(field, f"{field} cannot be empty")
    return code


def build_search_request(raw: RawSearchOptions, today: Optional[date] = None) -> SearchRequest:
    """
    Normalize raw CLI search options into a SearchRequest.

    Args:
        raw: Options as typed on the command line.
        today: Reference date for year inference (UTC). Defaults to now.

    Returns:
        Validated SearchRequest.

    Raises:
        ValidationError: On the first invalid field.
    """
    request = SearchRequest(
        origin=_airport(raw.origin, "from"),
        destination=_airport(raw.destination, "to"),
        outbound_date=parse_date_input(raw.date, "date", today=today),
        return_date=(
            parse_date_input(raw.return_date, "return-date", today=today)
            if raw.return_date
            else None
        ),
        adults=to_non_negative_int(raw.adults, "adults"),
        children=to_non_negative_int(raw.children, "children"),
        infants_in_seat=to_non_negative_int(raw.infants_in_seat, "infants-in-seat"),
        infants_on_lap=to_non_negative_int(raw.infants_on_lap, "infants-on-lap"),
        cabin=parse_cabin(raw.cabin),
        currency=raw.currency,
        hl=raw.hl,
        gl=raw.gl,
        max_price=to_non_negative_int(raw.max_price, "max-price") if raw.max_price else None,
        include_airlines=parse_airline_list(raw.airlines),
        exclude_airlines=parse_airline_list(raw.exclude_airlines),
        stops=parse_stops(raw.stops),
        deep_search=raw.deep_search,
    )
    logger.debug("Normalized request: %s", request)
    return request


def build_list_options(raw: RawListOptions) -> ListOptions:
    """
    Normalize raw table options into ListOptions.

    A limit of 0 falls back to the default limit.
    """
    limit = to_non_negative_int(raw.limit, "limit") or DEFAULT_LIMIT
    return ListOptions(
        limit=limit,
        sort_by=parse_sort_by(raw.sort_by),
        prefer_airline=raw.prefer_airline or None,
        prefer_nonstop=raw.prefer_nonstop,
        nonstop_only=raw.nonstop_only,
        show_token=raw.show_token,
    )
