"""
CLI entry point for rankings-scraper.

Usage:
    python -m rankings_scraper
    python -m rankings_scraper --years 2022,2023,2024 --output data.json
    python -m rankings_scraper --serve
"""

import argparse
import asyncio
import logging
import sys

import structlog

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        structlog.configure(
            processors=[
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )
    else:
        structlog.configure(
            processors=[
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
                structlog.dev.ConsoleRenderer(colors=True),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Yearly ranked listings scraper and API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape all configured years and save the data file
  python -m rankings_scraper

  # Scrape specific years into a custom file
  python -m rankings_scraper --years 2022,2023,2024 --output data.json

  # Start the HTTP API
  python -m rankings_scraper --serve

  # Use custom config file
  python -m rankings_scraper --config /path/to/settings.yml
        """,
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the HTTP API instead of scraping once",
    )

    parser.add_argument(
        "--years",
        type=str,
        help="Comma-separated list of years to scrape (default: configured range)",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to settings.yml config file",
    )

    parser.add_argument(
        "--output",
        type=str,
        help="Data file path (default: from settings)",
    )

    parser.add_argument(
        "--port",
        type=int,
        help="Port for --serve (default: from settings)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def build_settings(args):
    """Load settings and apply command line overrides."""
    from .config.loader import load_settings
    from .navigators.base import parse_years

    settings = load_settings(args.config)

    if args.years:
        settings.source.years = parse_years(args.years)
    if args.output:
        settings.storage.data_file = args.output
    if args.port:
        settings.server.port = args.port

    return settings


async def main_async(args) -> int:
    """Async main function."""
    from .orchestrator import RankingsPipeline

    logger = structlog.get_logger(__name__)
    settings = build_settings(args)

    if args.serve:
        from .web.server import start_web_server
        await start_web_server(settings)
        return 0

    logger.info(
        "starting_rankings_scraper",
        years=settings.source.years,
        data_file=settings.storage.data_file,
    )

    async def echo(line: str) -> None:
        sys.stdout.write(line)
        sys.stdout.flush()

    async with RankingsPipeline(settings) as pipeline:
        run = await pipeline.scrape_and_save(on_progress=echo)

    return 0 if run.years_covered else 1


def main():
    """Main entry point."""
    args = parse_args()

    if args.version:
        from . import __version__
        print(f"rankings-scraper {__version__}")
        sys.exit(0)

    setup_logging(args.log_level, args.json_logs)

    try:
        sys.exit(asyncio.run(main_async(args)))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        logger = structlog.get_logger(__name__)
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
