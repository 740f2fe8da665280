"""
Tests for the SerpAPI client adapter.

Tests cover:
- Query parameter encoding (required, optional, trip type, cabin codes)
- Single GET against the configured endpoint
- Error mapping (timeout, transport, HTTP status, JSON, provider error)
- Overall deadline on a slowly streamed response
- Last-moment date format check
"""

import logging
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, Iterator

import httpx
import pytest
import respx

from flights_cli.adapters.serpapi_client import (
    CABIN_MAP,
    ONE_WAY,
    ROUND_TRIP,
    SerpApiClient,
    build_query_params,
)
from flights_cli.config import SERPAPI_URL, Settings
from flights_cli.exceptions import (
    ProviderAPIError,
    ProviderError,
    ProviderHTTPError,
    ProviderResponseError,
    ProviderTimeoutError,
    ProviderTransportError,
    ValidationError,
)
from flights_cli.schemas.request import SearchRequest


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def client(settings: Settings) -> SerpApiClient:
    """SerpApiClient with a test key; the HTTP client is created lazily."""
    return SerpApiClient(settings)


def _with_outbound_date(request: SearchRequest, value: str) -> SearchRequest:
    """Bypass SearchRequest validation to simulate a malformed date."""
    object.__setattr__(request, "outbound_date", value)
    return request


class _TrickleHandler(BaseHTTPRequestHandler):
    """Sends headers at once, then the JSON body one byte at a time."""

    body = b" " * 29 + b"{}"

    def do_GET(self) -> None:
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(self.body)))
        self.end_headers()
        try:
            for i in range(len(self.body)):
                self.wfile.write(self.body[i : i + 1])
                self.wfile.flush()
                time.sleep(self.server.delay_seconds)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format: str, *args: Any) -> None:
        pass


@pytest.fixture
def trickle_server(monkeypatch: pytest.MonkeyPatch) -> Iterator[ThreadingHTTPServer]:
    """Local HTTP server streaming its body with `delay_seconds` between bytes."""
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY"):
        monkeypatch.delenv(var, raising=False)
        monkeypatch.delenv(var.lower(), raising=False)
    server = ThreadingHTTPServer(("127.0.0.1", 0), _TrickleHandler)
    server.daemon_threads = True
    server.delay_seconds = 0.2
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield server
    finally:
        server.shutdown()
        server.server_close()


# =============================================================================
# QUERY PARAMETERS
# =============================================================================


class TestBuildQueryParams:
    """Tests for build_query_params."""

    def test_one_way_required_params(self, one_way_request: SearchRequest) -> None:
        params = build_query_params(one_way_request, "secret")

        assert params == {
            "engine": "google_flights",
            "api_key": "secret",
            "departure_id": "JFK",
            "arrival_id": "LAX",
            "outbound_date": "2026-07-04",
            "type": ONE_WAY,
            "travel_class": "1",
            "adults": "1",
            "children": "0",
            "infants_in_seat": "0",
            "infants_on_lap": "0",
            "currency": "USD",
            "hl": "en",
            "gl": "us",
            "deep_search": "false",
        }

    def test_round_trip_sets_type_and_return_date(
        self, round_trip_request: SearchRequest
    ) -> None:
        params = build_query_params(round_trip_request, "secret")

        assert params["type"] == ROUND_TRIP == "1"
        assert params["return_date"] == "2026-07-11"

    def test_one_way_omits_return_date(self, one_way_request: SearchRequest) -> None:
        params = build_query_params(one_way_request, "secret")

        assert params["type"] == "2"
        assert "return_date" not in params

    @pytest.mark.parametrize(
        "cabin,code",
        [("economy", "1"), ("premium-economy", "2"), ("business", "3"), ("first", "4")],
    )
    def test_cabin_codes(self, cabin: str, code: str) -> None:
        request = SearchRequest(
            origin="JFK", destination="LAX", outbound_date="2026-07-04", cabin=cabin
        )

        assert build_query_params(request, "k")["travel_class"] == code
        assert CABIN_MAP[cabin] == code

    def test_optional_params_when_set(self) -> None:
        request = SearchRequest(
            origin="SFO",
            destination="NRT",
            outbound_date="2026-03-10",
            adults=2,
            children=1,
            max_price=1500,
            include_airlines=("UA", "NH"),
            exclude_airlines=("DL",),
            stops=0,
            deep_search=True,
        )

        params = build_query_params(request, "k")

        assert params["adults"] == "2"
        assert params["children"] == "1"
        assert params["max_price"] == "1500"
        assert params["include_airlines"] == "UA,NH"
        assert params["exclude_airlines"] == "DL"
        assert params["stops"] == "0"
        assert params["deep_search"] == "true"

    def test_optional_params_absent_by_default(self, one_way_request: SearchRequest) -> None:
        params = build_query_params(one_way_request, "k")

        for name in ("max_price", "include_airlines", "exclude_airlines", "stops"):
            assert name not in params

    def test_all_values_are_strings(self, round_trip_request: SearchRequest) -> None:
        params = build_query_params(round_trip_request, "k")

        assert all(isinstance(value, str) for value in params.values())


# =============================================================================
# SEARCH
# =============================================================================


class TestSearch:
    """Tests for SerpApiClient.search against a mocked endpoint."""

    @respx.mock
    def test_success_returns_payload_unmodified(
        self,
        client: SerpApiClient,
        one_way_request: SearchRequest,
        sample_payload: Dict[str, Any],
    ) -> None:
        sample_payload["unknown_field"] = {"kept": True}
        route = respx.get(SERPAPI_URL).mock(
            return_value=httpx.Response(200, json=sample_payload)
        )

        result = client.search(one_way_request)

        assert result == sample_payload
        assert route.call_count == 1

    @respx.mock
    def test_sends_encoded_params(
        self,
        client: SerpApiClient,
        round_trip_request: SearchRequest,
        empty_payload: Dict[str, Any],
    ) -> None:
        route = respx.get(SERPAPI_URL).mock(
            return_value=httpx.Response(200, json=empty_payload)
        )

        client.search(round_trip_request)

        sent = route.calls.last.request.url.params
        assert sent["engine"] == "google_flights"
        assert sent["api_key"] == "test-key"
        assert sent["departure_id"] == "JFK"
        assert sent["return_date"] == "2026-07-11"
        assert sent["type"] == "1"

    @respx.mock
    def test_timeout(self, client: SerpApiClient, one_way_request: SearchRequest) -> None:
        respx.get(SERPAPI_URL).mock(
            side_effect=httpx.TimeoutException("Connection timed out")
        )

        with pytest.raises(ProviderTimeoutError, match="timed out after 30 seconds"):
            client.search(one_way_request)

    @respx.mock
    def test_transport_error(
        self, client: SerpApiClient, one_way_request: SearchRequest
    ) -> None:
        respx.get(SERPAPI_URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(ProviderTransportError, match="Connection refused"):
            client.search(one_way_request)

    @respx.mock
    def test_http_error_status(
        self, client: SerpApiClient, one_way_request: SearchRequest
    ) -> None:
        respx.get(SERPAPI_URL).mock(
            return_value=httpx.Response(401, json={"error": "Invalid API key."})
        )

        with pytest.raises(ProviderHTTPError) as exc_info:
            client.search(one_way_request)

        assert exc_info.value.status_code == 401
        assert str(exc_info.value) == "SerpAPI request failed (401 Unauthorized)"

    @respx.mock
    def test_server_error(self, client: SerpApiClient, one_way_request: SearchRequest) -> None:
        respx.get(SERPAPI_URL).mock(return_value=httpx.Response(500))

        with pytest.raises(ProviderHTTPError, match="500 Internal Server Error"):
            client.search(one_way_request)

    @respx.mock
    def test_invalid_json(self, client: SerpApiClient, one_way_request: SearchRequest) -> None:
        respx.get(SERPAPI_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

        with pytest.raises(ProviderResponseError, match="not valid JSON"):
            client.search(one_way_request)

    @respx.mock
    def test_non_object_json(
        self, client: SerpApiClient, one_way_request: SearchRequest
    ) -> None:
        respx.get(SERPAPI_URL).mock(return_value=httpx.Response(200, json=[1, 2, 3]))

        with pytest.raises(ProviderResponseError, match="expected a JSON object, got list"):
            client.search(one_way_request)

    @respx.mock
    def test_provider_error_field(
        self, client: SerpApiClient, one_way_request: SearchRequest
    ) -> None:
        respx.get(SERPAPI_URL).mock(
            return_value=httpx.Response(
                200, json={"error": "Google Flights hasn't returned any results."}
            )
        )

        with pytest.raises(ProviderAPIError) as exc_info:
            client.search(one_way_request)

        assert exc_info.value.provider_message == "Google Flights hasn't returned any results."
        assert str(exc_info.value).startswith("SerpAPI error: ")

    @respx.mock
    def test_empty_error_field_is_not_an_error(
        self,
        client: SerpApiClient,
        one_way_request: SearchRequest,
    ) -> None:
        respx.get(SERPAPI_URL).mock(
            return_value=httpx.Response(200, json={"error": "", "best_flights": []})
        )

        assert client.search(one_way_request) == {"error": "", "best_flights": []}

    @respx.mock
    def test_loose_payload_passes_through(
        self, client: SerpApiClient, one_way_request: SearchRequest
    ) -> None:
        """search only requires a JSON object; the presenter checks the shape."""
        payload = {"best_flights": [{"flights": []}], "other_flights": "n/a"}
        respx.get(SERPAPI_URL).mock(return_value=httpx.Response(200, json=payload))

        assert client.search(one_way_request) == payload

    @respx.mock
    def test_search_logs_provider_name(
        self,
        client: SerpApiClient,
        one_way_request: SearchRequest,
        empty_payload: Dict[str, Any],
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        respx.get(SERPAPI_URL).mock(return_value=httpx.Response(200, json=empty_payload))
        caplog.set_level(logging.INFO, logger="flights_cli.adapters.serpapi_client")

        client.search(one_way_request)

        assert "via SerpAPI Google Flights" in caplog.text
        assert "test-key" not in caplog.text

    @respx.mock
    def test_malformed_date_fails_before_any_request(
        self, client: SerpApiClient, one_way_request: SearchRequest
    ) -> None:
        route = respx.get(SERPAPI_URL).mock(return_value=httpx.Response(200, json={}))
        request = _with_outbound_date(one_way_request, "7/4/2026")

        with pytest.raises(ValidationError, match="date must be in YYYY-MM-DD format"):
            client.search(request)

        assert route.call_count == 0

    def test_provider_errors_share_a_base(self) -> None:
        for error_type in (
            ProviderTimeoutError,
            ProviderTransportError,
            ProviderHTTPError,
            ProviderResponseError,
            ProviderAPIError,
        ):
            assert issubclass(error_type, ProviderError)


# =============================================================================
# OVERALL DEADLINE
# =============================================================================


class TestOverallDeadline:
    """The timeout bounds the whole call, not just each network read."""

    def _settings(self, server: ThreadingHTTPServer, timeout_seconds: float) -> Settings:
        return Settings(
            api_key="k",
            base_url=f"http://127.0.0.1:{server.server_address[1]}/search.json",
            timeout_seconds=timeout_seconds,
        )

    def test_slow_streamed_body_times_out(
        self, trickle_server: ThreadingHTTPServer, one_way_request: SearchRequest
    ) -> None:
        # 31 bytes at 0.2s each: no single read stalls for 1s, the whole body takes ~6s
        started = time.monotonic()

        with SerpApiClient(self._settings(trickle_server, 1.0)) as adapter:
            with pytest.raises(ProviderTimeoutError, match="timed out after 1 seconds"):
                adapter.search(one_way_request)

        assert time.monotonic() - started < 3.0

    def test_body_within_deadline(
        self, trickle_server: ThreadingHTTPServer, one_way_request: SearchRequest
    ) -> None:
        trickle_server.delay_seconds = 0.0

        with SerpApiClient(self._settings(trickle_server, 5.0)) as adapter:
            assert adapter.search(one_way_request) == {}


# =============================================================================
# LIFECYCLE
# =============================================================================


class TestClientLifecycle:
    """Tests for client creation and cleanup."""

    def test_name(self, client: SerpApiClient) -> None:
        assert client.name == "SerpAPI Google Flights"

    def test_uses_injected_client(self, settings: Settings) -> None:
        http_client = httpx.Client()
        adapter = SerpApiClient(settings, client=http_client)

        assert adapter._get_client() is http_client
        adapter.close()
        assert http_client.is_closed

    def test_lazy_client_uses_configured_timeout(self) -> None:
        adapter = SerpApiClient(Settings(api_key="k", timeout_seconds=5))

        http_client = adapter._get_client()

        assert http_client.timeout.read == 5
        adapter.close()

    def test_context_manager_closes(self, settings: Settings) -> None:
        http_client = httpx.Client()

        with SerpApiClient(settings, client=http_client) as adapter:
            assert adapter.name

        assert http_client.is_closed
