"""
Domain services for flights_cli.

- normalizer: raw CLI strings -> SearchRequest / ListOptions
- presenter: provider payload -> ranked, filtered table
"""

from flights_cli.services.normalizer import build_list_options, build_search_request
from flights_cli.services.presenter import Outcome, Presentation, present

__all__ = [
    "build_search_request",
    "build_list_options",
    "present",
    "Presentation",
    "Outcome",
]
