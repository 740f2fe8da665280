"""
flights-cli - command-line entry point.

Wires the pieces together for one stateless invocation:
CLI args -> normalizer -> SerpAPI client -> presenter -> stdout.

Usage:
    flights-cli google-flights search --from JFK --to LAX --date 7/4
    flights-cli google-flights list --from JFK --to LAX --date 2026-07-04 --sort-by duration
"""

import argparse
import json
import logging
import sys
from typing import Callable, List, Optional

from flights_cli import __version__
from flights_cli.adapters.serpapi_client import SerpApiClient
from flights_cli.config import API_KEY_ENV_VAR, load_settings
from flights_cli.exceptions import FlightsCliError
from flights_cli.ports.flight_search_provider import FlightSearchProvider
from flights_cli.schemas.request import RawListOptions, RawSearchOptions
from flights_cli.services.normalizer import build_list_options, build_search_request
from flights_cli.services.presenter import present

logger = logging.getLogger(__name__)

# Builds the provider from an optional explicit API key; swapped out in tests.
ProviderFactory = Callable[[Optional[str]], FlightSearchProvider]


def setup_logging(verbosity: int = 0) -> None:
    """
    Configure root logging on stderr.

    stdout carries command output only, so log records never mix with
    JSON or table output.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)

    root_logger.handlers = [handler]

    # httpx logs every request URL at INFO, api_key included
    logging.getLogger("httpx").setLevel(logging.WARNING)


def default_provider_factory(api_key: Optional[str]) -> FlightSearchProvider:
    return SerpApiClient(load_settings(api_key))


# -------------------------------
# Argument parser
# -------------------------------


def _add_search_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--from", dest="origin", required=True, metavar="AIRPORT",
                        help="departure airport code, e.g. JFK")
    parser.add_argument("--to", dest="destination", required=True, metavar="AIRPORT",
                        help="arrival airport code, e.g. LAX")
    parser.add_argument("--date", required=True,
                        help="outbound date: YYYY-MM-DD or M/D[/YYYY]")
    parser.add_argument("--return-date",
                        help="return date: YYYY-MM-DD or M/D[/YYYY]")
    parser.add_argument("--adults", default="1", metavar="COUNT", help="number of adults")
    parser.add_argument("--children", default="0", metavar="COUNT", help="number of children")
    parser.add_argument("--infants-in-seat", default="0", metavar="COUNT",
                        help="number of infants in seat")
    parser.add_argument("--infants-on-lap", default="0", metavar="COUNT",
                        help="number of infants on lap")
    parser.add_argument("--cabin", default="economy", metavar="TYPE",
                        help="economy|premium-economy|business|first")
    parser.add_argument("--currency", default="USD", metavar="CODE", help="currency code")
    parser.add_argument("--hl", default="en", metavar="LANG", help="language")
    parser.add_argument("--gl", default="us", metavar="COUNTRY", help="country")
    parser.add_argument("--max-price", metavar="AMOUNT", help="maximum total price")
    parser.add_argument("--airlines", metavar="CODES_OR_NAMES",
                        help="include airlines (csv), e.g. UA or united,delta")
    parser.add_argument("--exclude-airlines", metavar="CODES_OR_NAMES",
                        help="exclude airlines (csv)")
    parser.add_argument("--stops", metavar="COUNT", help="0|1|2|3 stops")
    parser.add_argument("--deep-search", action="store_true", help="enable deep search")
    parser.add_argument("--api-key", metavar="KEY",
                        help=f"SerpAPI key (or set {API_KEY_ENV_VAR})")


def _add_list_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--limit", default="10", metavar="COUNT", help="maximum rows to print")
    parser.add_argument("--sort-by", default="price", metavar="FIELD",
                        help="price|duration|stops")
    parser.add_argument("--prefer-airline", metavar="NAME_OR_CODE",
                        help="rank matching airline options first")
    parser.add_argument("--prefer-nonstop", action="store_true",
                        help="rank fewer-stop options first before sort-by")
    parser.add_argument("--nonstop-only", action="store_true",
                        help="only include nonstop options")
    parser.add_argument("--show-token", action="store_true",
                        help="print departure_token column if present")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flights-cli",
        description="Multi-provider flights CLI",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="log progress to stderr (-vv for debug)")

    providers = parser.add_subparsers(dest="provider", required=True, metavar="PROVIDER")

    google = providers.add_parser("google-flights", help="Google Flights tools (via SerpAPI)")
    commands = google.add_subparsers(dest="command", required=True, metavar="COMMAND")

    search = commands.add_parser(
        "search",
        help="Search Google Flights and print raw JSON (single SerpAPI request)",
    )
    _add_search_options(search)
    search.set_defaults(handler=run_search)

    listing = commands.add_parser(
        "list",
        help="Search and list flight options in a ranked table (single SerpAPI request)",
    )
    _add_search_options(listing)
    _add_list_options(listing)
    listing.set_defaults(handler=run_list)

    return parser


# -------------------------------
# Command handlers
# -------------------------------


def _raw_search_options(args: argparse.Namespace) -> RawSearchOptions:
    return RawSearchOptions(
        origin=args.origin,
        destination=args.destination,
        date=args.date,
        return_date=args.return_date,
        adults=args.adults,
        children=args.children,
        infants_in_seat=args.infants_in_seat,
        infants_on_lap=args.infants_on_lap,
        cabin=args.cabin,
        currency=args.currency,
        hl=args.hl,
        gl=args.gl,
        max_price=args.max_price,
        airlines=args.airlines,
        exclude_airlines=args.exclude_airlines,
        stops=args.stops,
        deep_search=args.deep_search,
    )


def _raw_list_options(args: argparse.Namespace) -> RawListOptions:
    return RawListOptions(
        limit=args.limit,
        sort_by=args.sort_by,
        prefer_airline=args.prefer_airline,
        prefer_nonstop=args.prefer_nonstop,
        nonstop_only=args.nonstop_only,
        show_token=args.show_token,
    )


def run_search(args: argparse.Namespace, provider_factory: ProviderFactory) -> int:
    """Print the unmodified provider payload as JSON."""
    request = build_search_request(_raw_search_options(args))

    with provider_factory(args.api_key) as provider:
        data = provider.search(request)

    print(json.dumps(data, indent=2, ensure_ascii=False))
    return 0


def run_list(args: argparse.Namespace, provider_factory: ProviderFactory) -> int:
    """Print the ranked, filtered table."""
    request = build_search_request(_raw_search_options(args))
    options = build_list_options(_raw_list_options(args))

    with provider_factory(args.api_key) as provider:
        data = provider.search(request)

    presentation = present(data, request, options)
    logger.info("Presentation outcome: %s", presentation.outcome.value)
    for line in presentation.lines:
        print(line)
    return 0


def main(
    argv: Optional[List[str]] = None,
    provider_factory: ProviderFactory = default_provider_factory,
) -> int:
    """
    Run one CLI invocation.

    Returns:
        0 on success (including "no results"), 1 on any flights_cli error,
        130 when interrupted. argparse exits with 2 on usage errors.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        return args.handler(args, provider_factory)
    except FlightsCliError as e:
        logger.debug("Invocation failed", exc_info=True)
        print(str(e), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
