# run_pipeline.py
import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Import RichHandler here for centralized logging
from rich.logging import RichHandler

from catalog_pipeline.config import load_settings, SETTLE_MODES
from catalog_pipeline.errors import ConfigFault
from catalog_pipeline.main import main as run_pipeline


def configure_logging(verbose: bool):
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)-8s - %(name)-25s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    file_handler = logging.FileHandler(Path("pipeline.log"), encoding="utf-8")
    file_handler.setLevel(logging.DEBUG) # Log all debug messages to file
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    rich_handler = RichHandler(
        level=logging.DEBUG if verbose else logging.INFO,
        show_time=True,
        show_level=True,
        show_path=False,
    )
    root_logger.addHandler(rich_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scrape a load-more product catalog and enrich its highest-priced products.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument(
        '--steps',
        nargs='+',
        type=int,
        choices=[1, 2],
        default=[1, 2],
        help="""Specify which pipeline steps to run.
    1: Scrape the listing page and save the rows
    2: Rank the saved rows and fetch the top product pages
Example: python run_pipeline.py --steps 2
"""
    )
    parser.add_argument('--config', type=Path, help="JSON5 file with options such as topN, revealAttempts, settleDelayMs.")
    parser.add_argument('--target-url', type=str, help="Listing page to scrape.")
    parser.add_argument('--top-n', type=int, help="How many of the highest-priced products to enrich (default 5).")
    parser.add_argument('--reveal-attempts', type=int, help="Maximum number of 'load more' clicks (default 4).")
    parser.add_argument('--settle-delay-ms', type=int, help="Wait after each click in milliseconds (default 2000).")
    parser.add_argument('--settle-mode', choices=SETTLE_MODES, help="'fixed' waits the full delay, 'poll' stops once new items render.")
    parser.add_argument('--headed', action='store_true', help="Show the browser window.")
    parser.add_argument('--record-har', type=Path, help="Record the browser session's network traffic to this HAR file.")
    parser.add_argument('-v', '--verbose', action='store_true', help="Show debug messages on the console.")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()
    configure_logging(args.verbose)

    try:
        settings = load_settings(
            args.config,
            target_url=args.target_url,
            top_n=args.top_n,
            reveal_attempts=args.reveal_attempts,
            settle_delay_ms=args.settle_delay_ms,
            settle_mode=args.settle_mode,
            headless=False if args.headed else None,
        )
    except ConfigFault as e:
        logging.critical("Invalid configuration: %s", e)
        sys.exit(2)

    if args.record_har and args.record_har.parent:
        args.record_har.parent.mkdir(parents=True, exist_ok=True)

    logging.info("=" * 60)
    logging.info("Catalog Scraping Pipeline Starting...")
    logging.info("Running steps: %s", args.steps)
    logging.info("=" * 60)

    succeeded = False
    try:
        succeeded = asyncio.run(run_pipeline(steps_to_run=args.steps, settings=settings, har_output_path=args.record_har))
    except KeyboardInterrupt:
        logging.warning("Pipeline interrupted by user.")
    except Exception as e:
        logging.critical("An unexpected error occurred: %s", e, exc_info=True)
    finally:
        logging.info("=" * 60)
        logging.info("Pipeline execution finished.")

    sys.exit(0 if succeeded else 1)
