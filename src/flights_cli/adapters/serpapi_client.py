"""
SerpAPI client - Google Flights search over HTTPS.

Encodes a normalized SearchRequest as SerpAPI query parameters, issues
exactly one GET bounded by an overall deadline and maps every failure
mode to the flights_cli exception hierarchy. No retries, no pagination.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from flights_cli.config import Settings
from flights_cli.exceptions import (
    ProviderAPIError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTimeoutError,
    ProviderTransportError,
    ValidationError,
)
from flights_cli.ports.flight_search_provider import FlightSearchProvider
from flights_cli.schemas.request import ISO_DATE_RE, SearchRequest

logger = logging.getLogger(__name__)

ENGINE = "google_flights"

# SerpAPI travel_class codes
CABIN_MAP: Dict[str, str] = {
    "economy": "1",
    "premium-economy": "2",
    "business": "3",
    "first": "4",
}

# SerpAPI trip type codes
ROUND_TRIP = "1"
ONE_WAY = "2"


def _assert_date(value: str, field: str) -> None:
    if not ISO_DATE_RE.match(value):
        raise ValidationError(field, f"{field} must be in YYYY-MM-DD format")


def build_query_params(request: SearchRequest, api_key: str) -> Dict[str, str]:
    """
    Encode a request as SerpAPI google_flights query parameters.

    Optional parameters are only added when the request sets them.

    Args:
        request: Normalized search request.
        api_key: SerpAPI key.

    Returns:
        Ordered mapping of query parameter name to string value.
    """
    params: Dict[str, str] = {
        "engine": ENGINE,
        "api_key": api_key,
        "departure_id": request.origin,
        "arrival_id": request.destination,
        "outbound_date": request.outbound_date,
        "type": ROUND_TRIP if request.is_round_trip else ONE_WAY,
        "travel_class": CABIN_MAP[request.cabin],
        "adults": str(request.adults),
        "children": str(request.children),
        "infants_in_seat": str(request.infants_in_seat),
        "infants_on_lap": str(request.infants_on_lap),
        "currency": request.currency,
        "hl": request.hl,
        "gl": request.gl,
        "deep_search": "true" if request.deep_search else "false",
    }

    if request.return_date:
        params["return_date"] = request.return_date

    if request.max_price is not None:
        params["max_price"] = str(request.max_price)

    if request.include_airlines:
        params["include_airlines"] = ",".join(request.include_airlines)

    if request.exclude_airlines:
        params["exclude_airlines"] = ",".join(request.exclude_airlines)

    if request.stops is not None:
        params["stops"] = str(request.stops)

    return params


def _count(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    return len(value) if isinstance(value, list) else 0


def _redact(params: Dict[str, str]) -> Dict[str, str]:
    return {k: ("***" if k == "api_key" else v) for k, v in params.items()}


class SerpApiClient(FlightSearchProvider):
    """
    Provider adapter for the SerpAPI google_flights engine.

    Attributes:
        _settings: Resolved credential, endpoint and timeout.
        _client: Synchronous HTTP client (lazy initialized).
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """
        Initialize the SerpAPI client.

        Args:
            settings: Provider settings. A Settings instance always carries
                a non-empty API key, so a missing credential fails before
                this adapter can ever be built.
            client: Pre-built httpx client (tests). If None, one is created
                on first use.
        """
        self._settings = settings
        self._client = client

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                headers={"Accept": "application/json"},
                timeout=httpx.Timeout(self._settings.timeout_seconds),
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            self._client.close()
        self._client = None

    @property
    def name(self) -> str:
        return "SerpAPI Google Flights"

    def search(self, request: SearchRequest) -> Dict[str, Any]:
        """
        Search Google Flights with a single SerpAPI request.

        The whole call, from connect to the last body byte, is bounded by
        `timeout_seconds`. httpx.Timeout only bounds each network step.

        Args:
            request: Normalized search request.

        Returns:
            The provider payload, unmodified.

        Raises:
            ValidationError: If a date is not YYYY-MM-DD.
            ProviderTimeoutError: If the call does not finish within the timeout.
            ProviderTransportError: On network failures.
            ProviderHTTPError: On a non-2xx status.
            ProviderResponseError: If the body is not a JSON object.
            ProviderAPIError: If the payload carries an `error` field.
        """
        _assert_date(request.outbound_date, "date")
        if request.return_date:
            _assert_date(request.return_date, "return-date")

        params = build_query_params(request, self._settings.api_key)
        logger.info(
            "Searching %s -> %s on %s (%s) via %s",
            request.origin,
            request.destination,
            request.outbound_date,
            "round trip" if request.is_round_trip else "one way",
            self.name,
        )
        logger.debug("GET %s params=%s", self._settings.base_url, _redact(params))

        deadline = time.monotonic() + self._settings.timeout_seconds
        try:
            with self._get_client().stream(
                "GET", self._settings.base_url, params=params
            ) as response:
                if not response.is_success:
                    logger.error(
                        "SerpAPI HTTP %s: %s", response.status_code, response.reason_phrase
                    )
                    raise ProviderHTTPError(response.status_code, response.reason_phrase)
                body = self._read_body(response, deadline)
        except httpx.TimeoutException as e:
            logger.error("SerpAPI request timed out: %s", e)
            raise ProviderTimeoutError(self._settings.timeout_seconds) from e
        except httpx.RequestError as e:
            logger.error("SerpAPI transport error: %s", e)
            raise ProviderTransportError(str(e)) from e

        try:
            data = json.loads(body)
        except ValueError as e:
            logger.error("Invalid JSON from SerpAPI: %s", e)
            raise ProviderResponseError("body is not valid JSON") from e

        if not isinstance(data, dict):
            raise ProviderResponseError(f"expected a JSON object, got {type(data).__name__}")

        if data.get("error"):
            logger.warning("SerpAPI reported an error: %s", data["error"])
            raise ProviderAPIError(str(data["error"]))

        logger.info(
            "Received %d best and %d other flight options",
            _count(data, "best_flights"),
            _count(data, "other_flights"),
        )
        return data

    def _read_body(self, response: httpx.Response, deadline: float) -> bytes:
        """Read the streamed body, giving up once the overall deadline passes."""
        chunks: List[bytes] = []
        for chunk in response.iter_bytes():
            self._check_deadline(deadline)
            chunks.append(chunk)
        self._check_deadline(deadline)
        return b"".join(chunks)

    def _check_deadline(self, deadline: float) -> None:
        if time.monotonic() > deadline:
            logger.error(
                "SerpAPI call exceeded %ss, aborting", self._settings.timeout_seconds
            )
            raise ProviderTimeoutError(self._settings.timeout_seconds)
