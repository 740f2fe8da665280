"""
flights_cli - Google Flights search from the command line (via SerpAPI).

Normalizes loose CLI input into a canonical request, issues a single
provider call, and ranks/filters the returned flight options.
"""

__version__ = "0.1.0"
