"""
Result Presenter - flattens, filters, ranks and renders flight options.

Turns a raw SerpAPI payload into a bounded, ranked table:
1. Flattens best_flights / other_flights into RankedRows
2. Applies the client-side filters the provider cannot express
3. Sorts with a deterministic multi-key ranking
4. Truncates to the requested limit and renders text lines

"No results" (empty payload) and "no matches" (everything filtered out)
are reported as distinct outcomes, never as errors.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from flights_cli.exceptions import ProviderResponseError
from flights_cli.schemas.request import ListOptions, SearchRequest
from flights_cli.schemas.response import FlightResult, GoogleFlightsResponse
from flights_cli.schemas.rows import RankedRow, RankedRowFrame, RankedRowSchema

__all__ = [
    "NO_MATCHES_MESSAGE",
    "NO_RESULTS_MESSAGE",
    "Outcome",
    "Presentation",
    "apply_filters",
    "flatten_results",
    "matches_preferred_airline",
    "present",
    "rank_rows",
    "render_table",
    "rows_to_frame",
]

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No flights found."
NO_MATCHES_MESSAGE = "No flights matched the selected filters in this single response."
ROUND_TRIP_NOTE = (
    "note: round-trip first response mostly lists outbound options; "
    "use departure_token for return-leg follow-up queries."
)

TABLE_COLUMNS: List[str] = [
    "group",
    "rank",
    "price",
    "duration",
    "stops",
    "depart",
    "arrive",
    "route",
    "airlines",
    "segments",
]

# sort_by option -> frame column
SORT_COLUMNS: Dict[str, str] = {
    "price": "price_sort",
    "duration": "duration_minutes",
    "stops": "stops",
}

_PREFERRED_MISS = "_preferred_miss"


class Outcome(str, Enum):
    """How a presentation ended."""

    NO_RESULTS = "no_results"
    NO_MATCHES = "no_matches"
    TABLE = "table"


@dataclass(frozen=True)
class Presentation:
    """
    Result of presenting one provider payload.

    Attributes:
        outcome: Whether a table was produced, or why not.
        lines: Text lines to print, in order.
        shown: Number of rows in the table.
        total: Number of rows that survived the filters.
        rows: The shown rows, ranked (empty frame when there is no table).
    """

    outcome: Outcome
    lines: Tuple[str, ...]
    shown: int = 0
    total: int = 0
    rows: pd.DataFrame = field(default_factory=pd.DataFrame, compare=False, repr=False)


# -------------------------------
# Flattening
# -------------------------------


def _collect_rows(results: Optional[List[FlightResult]], group: str) -> List[RankedRow]:
    if not results:
        return []
    return [RankedRow.from_flight(flight, group, index + 1) for index, flight in enumerate(results)]


def flatten_results(response: GoogleFlightsResponse) -> List[RankedRow]:
    """
    Flatten both provider buckets into rows.

    Rank is the 1-based position inside each bucket, as the provider
    returned it. Best rows come before other rows.
    """
    return _collect_rows(response.best_flights, "best") + _collect_rows(
        response.other_flights, "other"
    )


def rows_to_frame(rows: List[RankedRow]) -> RankedRowFrame:
    """
    Build the ranked-row DataFrame and validate it against RankedRowSchema.

    Args:
        rows: Non-empty list of rows.

    Returns:
        Validated DataFrame, one row per RankedRow, provider order.
    """
    if not rows:
        raise ValueError("rows_to_frame needs at least one row")

    frame = pd.DataFrame([row.to_dict() for row in rows])
    return RankedRowSchema.validate(frame)


# -------------------------------
# Filtering
# -------------------------------


def apply_filters(
    frame: pd.DataFrame,
    request: SearchRequest,
    options: ListOptions,
) -> pd.DataFrame:
    """
    Apply the client-side filters to the ranked-row frame.

    Filters, each skipped when its option is absent:
    (a) exact stop count
    (b) include airlines: at least one carrier and all carriers included
    (c) exclude airlines: no carrier excluded
    (d) nonstop only

    Args:
        frame: Frame from rows_to_frame.
        request: Normalized search request (stops, airline sets).
        options: Presentation options (nonstop_only).

    Returns:
        Filtered frame, original order and index preserved.
    """
    mask = pd.Series(True, index=frame.index)

    if request.stops is not None:
        mask &= frame["stops"] == request.stops

    if request.include_airlines:
        include = set(request.include_airlines)
        mask &= frame["carrier_codes"].map(
            lambda codes: bool(codes) and all(code in include for code in codes)
        ).astype(bool)

    if request.exclude_airlines:
        exclude = set(request.exclude_airlines)
        mask &= frame["carrier_codes"].map(
            lambda codes: not any(code in exclude for code in codes)
        ).astype(bool)

    if options.nonstop_only:
        mask &= frame["stops"] == 0

    filtered = frame[mask]
    logger.debug("Filters kept %d of %d rows", len(filtered), len(frame))
    return filtered


# -------------------------------
# Ranking
# -------------------------------


def matches_preferred_airline(frame: pd.DataFrame, prefer_airline: str) -> pd.Series:
    """Case-insensitive substring match against airline names and segments."""
    needle = prefer_airline.strip().lower()
    haystack = (frame["airlines"] + " " + frame["segments"]).str.lower()
    return haystack.str.contains(needle, regex=False)


def rank_rows(frame: pd.DataFrame, options: ListOptions) -> pd.DataFrame:
    """
    Sort rows by the composite ranking.

    Keys, highest priority first, all ascending:
    1. preferred airline match (matches first), if prefer_airline is set
    2. stop count, if prefer_nonstop is set
    3. the sort_by field (price_sort, duration_minutes or stops)
    4. group name
    5. provider rank within group

    group + rank is unique, so the order is total.
    """
    work = frame.copy()
    keys: List[str] = []

    if options.prefer_airline:
        work[_PREFERRED_MISS] = ~matches_preferred_airline(work, options.prefer_airline)
        keys.append(_PREFERRED_MISS)

    if options.prefer_nonstop:
        keys.append("stops")

    keys.extend([SORT_COLUMNS[options.sort_by], "group", "rank"])
    keys = list(dict.fromkeys(keys))

    ranked = work.sort_values(by=keys, kind="mergesort")
    if _PREFERRED_MISS in ranked.columns:
        ranked = ranked.drop(columns=[_PREFERRED_MISS])
    return ranked.reset_index(drop=True)


# -------------------------------
# Rendering
# -------------------------------


def render_table(frame: pd.DataFrame, show_token: bool = False) -> str:
    """Render rows as a plain-text table."""
    table = frame[TABLE_COLUMNS].copy()
    if show_token:
        table["departure_token"] = frame["departure_token"].map(lambda token: token or "")
    return table.to_string(index=False)


def _metadata_lines(response: GoogleFlightsResponse) -> List[str]:
    lines: List[str] = []
    metadata = response.search_metadata
    if metadata is None:
        return lines
    if metadata.id:
        lines.append(f"search_id: {metadata.id}")
    if metadata.google_flights_url:
        lines.append(f"google_flights_url: {metadata.google_flights_url}")
    return lines


def present(
    payload: Dict[str, Any],
    request: SearchRequest,
    options: ListOptions,
) -> Presentation:
    """
    Turn a provider payload into printable output.

    Args:
        payload: Raw provider payload (as returned by the client).
        request: The request that produced it.
        options: Presentation options.

    Returns:
        Presentation with the outcome, output lines and shown rows.

    Raises:
        ProviderResponseError: If the payload does not have the expected shape.
    """
    try:
        response = GoogleFlightsResponse.model_validate(payload)
    except PydanticValidationError as e:
        logger.error("Unexpected SerpAPI payload shape: %s", e)
        raise ProviderResponseError(
            f"unexpected payload shape ({e.error_count()} errors)"
        ) from e

    rows = flatten_results(response)

    if not rows:
        logger.info("Provider returned no flight options")
        return Presentation(outcome=Outcome.NO_RESULTS, lines=(NO_RESULTS_MESSAGE,))

    frame = rows_to_frame(rows)
    filtered = apply_filters(frame, request, options)

    if filtered.empty:
        logger.info("All %d flight options were filtered out", len(frame))
        return Presentation(outcome=Outcome.NO_MATCHES, lines=(NO_MATCHES_MESSAGE,))

    ranked = rank_rows(filtered, options)
    shown = ranked.head(options.limit)

    lines = _metadata_lines(response)
    lines.append(f"results_shown: {len(shown)}/{len(ranked)}")
    lines.append(render_table(shown, show_token=options.show_token))
    if request.is_round_trip:
        lines.append(ROUND_TRIP_NOTE)

    return Presentation(
        outcome=Outcome.TABLE,
        lines=tuple(lines),
        shown=len(shown),
        total=len(ranked),
        rows=shown,
    )
