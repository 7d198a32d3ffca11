#!/usr/bin/env python3
"""
Always-On Baseline Runner

Usage:
    python scripts/run_always_on.py SITE_HASH
    python scripts/run_always_on.py SITE_A SITE_B --date 2017-11-01
    python scripts/run_always_on.py SITE_HASH --ratio 1.25 --json
"""

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dotenv import load_dotenv

from alwayson.core.config import get_settings
from alwayson.core.exceptions import AlwaysOnError
from alwayson.pipeline import AlwaysOnCalculator

# Load environment
load_dotenv(PROJECT_ROOT / ".env")


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Estimate the always-on baseline load of one or more sites",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/run_always_on.py abcd1234
    python scripts/run_always_on.py abcd1234 --date 2017-11-01 --verbose

The access token is read from ALWAYSON_ACCESS_TOKEN (or .env).
        """,
    )

    parser.add_argument(
        "sites",
        nargs="+",
        help="Site hash(es) to analyse",
    )

    parser.add_argument(
        "--date", "-d",
        type=str,
        default=None,
        help="Base day (YYYY-MM-DD, site local time); the month before it is analysed",
    )

    parser.add_argument(
        "--ratio", "-r",
        type=float,
        default=None,
        help="Consistency ratio (default from settings)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print full results as JSON",
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


async def main() -> int:
    """Main entry point."""
    args = parse_args()

    setup_logging("DEBUG" if args.verbose else get_settings().log_level)
    logger = logging.getLogger(__name__)

    base_time = None
    if args.date:
        try:
            base_time = datetime.strptime(args.date, "%Y-%m-%d")
        except ValueError:
            logger.error(f"Invalid date format: {args.date}. Use YYYY-MM-DD.")
            return 1

    try:
        calculator = AlwaysOnCalculator(consistency_ratio=args.ratio)
    except AlwaysOnError as e:
        logger.error(f"Failed to initialize calculator: {e}")
        logger.error("Set ALWAYSON_ACCESS_TOKEN in the environment or .env file")
        return 1

    failures = 0
    async with calculator:
        for site_hash in args.sites:
            try:
                result = await calculator.calculate_result(site_hash, base_time)
            except AlwaysOnError as e:
                logger.error(f"Failed to process {site_hash}: {e}")
                failures += 1
                continue

            if args.json:
                print(json.dumps(result.to_dict(), indent=2))
            else:
                print(
                    f"{site_hash}: {result.value:.2f} "
                    f"({result.retained_count}/{result.picked_count} readings, {result.timezone})"
                )

    return 1 if failures else 0


def main_sync() -> int:
    """Synchronous wrapper for main."""
    return asyncio.run(main())


if __name__ == "__main__":
    sys.exit(main_sync())
