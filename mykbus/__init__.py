"""
Mykonos Bus timetable scraper and API.
"""

from pathlib import Path
import sys
import logging
import argparse
import dataclasses

from mykbus.types import ScrapeContext
from mykbus.cache import ScheduleCache, TimetableService
from mykbus.catalog import CATALOG
from mykbus.config import ConfigError, load_config
from mykbus.render import StaticProvider, make_provider
from mykbus.schedules import scrape_schedules, to_json
from mykbus.scrape.error import ScrapeError
from mykbus.web_app import run


def get_logger(verbose: bool) -> logging.Logger:
    """
    Setup and return a Logger.
    """

    level = logging.INFO if verbose else logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter("%(levelname)s: %(message)s")
    handler.setFormatter(formatter)
    root.addHandler(handler)

    return root


def scrape(args: argparse.Namespace) -> None:
    """
    scrape subcommand
    """
    logger = get_logger(args.verbose)
    config = load_config()

    if args.html is not None:
        provider = StaticProvider(Path(args.html).read_text(encoding="utf-8"))
    else:
        provider = make_provider(config, logger)

    ctx = ScrapeContext(logger, provider)

    try:
        schedule_set = scrape_schedules(ctx, config.timetables_url, CATALOG)
    except ScrapeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)

    indent = 4 if args.pretty else None
    serialized = to_json(schedule_set, indent=indent)

    if args.output is not None:
        outfile = open(args.output, "w", encoding="utf-8")
    else:
        outfile = sys.stdout

    outfile.write(serialized)
    outfile.write("\n")

    if args.output:
        outfile.close()


def serve(args: argparse.Namespace) -> None:
    """
    serve subcommand
    """
    logger = get_logger(args.verbose)
    config = load_config()

    if args.port is not None:
        config = dataclasses.replace(config, port=args.port)
    if not config.refresh_secret:
        logger.warning("REFRESH_SECRET is not set; /api/refresh will reject everything")

    ctx = ScrapeContext(logger, make_provider(config, logger))
    service = TimetableService(
        ctx,
        ScheduleCache(config.cache_ttl),
        config.timetables_url,
        CATALOG,
        config.pass_timeout,
    )

    run(config, service, host=args.host)


COMMANDS = {
    "scrape": scrape,
    "serve": serve,
}


def main() -> None:
    """
    Parse arguments and run the Scraper or the API.
    """

    parser = argparse.ArgumentParser(prog="mykbus")
    parser.add_argument(
        "-v", "--verbose", help="enable more verbose output", action="store_true"
    )

    subparsers = parser.add_subparsers(dest="command")
    scrape_parser = subparsers.add_parser(
        "scrape", help="scrape the timetable page once and output json"
    )
    scrape_parser.add_argument("-o", "--output", help="output file", default=None)
    scrape_parser.add_argument(
        "-p", "--pretty", help="pretty print output", action="store_true"
    )
    scrape_parser.add_argument(
        "--html", help="read a saved page instead of fetching it", default=None
    )

    serve_parser = subparsers.add_parser("serve", help="run the timetable api")
    serve_parser.add_argument("--host", help="address to bind", default="0.0.0.0")
    serve_parser.add_argument(
        "--port", help="port to bind (overrides PORT)", type=int, default=None
    )

    args = parser.parse_args()

    if not args.command in COMMANDS:
        print(f"error: unrecognized command: {args.command}", file=sys.stderr)
        sys.exit(1)

    try:
        COMMANDS[args.command](args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)
