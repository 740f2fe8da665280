"""
Adapter implementations for flights_cli.

Adapters are concrete implementations of the port interfaces.
"""

from flights_cli.adapters.serpapi_client import SerpApiClient, build_query_params

__all__ = ["SerpApiClient", "build_query_params"]
