"""
Port interfaces for flights_cli.

Ports define the abstract interfaces the services depend on, so the
CLI can swap the SerpAPI adapter for a fake in tests.
"""

from flights_cli.ports.flight_search_provider import FlightSearchProvider

__all__ = ["FlightSearchProvider"]
