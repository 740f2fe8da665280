"""
Flight Search Provider port interface.

Defines the abstract contract for remote flight search backends.
Implementations handle transport, authentication and error mapping.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from flights_cli.schemas.request import SearchRequest


class FlightSearchProvider(ABC):
    """
    Abstract interface for flight search providers.

    Implementations:
    - SerpApiClient: SerpAPI google_flights engine over HTTPS
    """

    @abstractmethod
    def search(self, request: SearchRequest) -> Dict[str, Any]:
        """
        Run one search and return the provider payload unmodified.

        Args:
            request: Normalized search request.

        Returns:
            The decoded JSON object returned by the provider.

        Raises:
            ValidationError: If the request fails a last-moment check.
            ProviderError: On transport, HTTP or provider-reported failures.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable provider name."""
        ...

    def close(self) -> None:
        """Release any transport resources. Default is a no-op."""
        return None

    def __enter__(self) -> "FlightSearchProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
