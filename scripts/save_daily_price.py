"""Close-of-day snapshot: store today's landed price in the daily history.

Meant to run once a day from cron at or after the IST close time
(Config.CLOSE_TIME_IST, default 23:45). The stored close becomes tomorrow's
24h change reference.

Usage:
    # Save today's silver close (refuses before close time)
    python scripts/save_daily_price.py

    # Gold, ignoring the close time
    python scripts/save_daily_price.py --metal gold --force

    # Replace a snapshot already stored for today
    python scripts/save_daily_price.py --force --overwrite

Example:
    $ python scripts/save_daily_price.py --metal silver
    [INFO] Saved silver close for 2026-03-02: 251.37/gram (calculated)
"""

import argparse
import sys

from src.pricing.calculator import METALS
from src.pricing.price_service import MetalPriceService
from src.shared.config import Config
from src.shared.utils import setup_logger
from src.tracker.close_of_day import CloseOfDayJob


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Save today's closing price to the daily history",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--metal",
        type=str,
        default="silver",
        choices=sorted(METALS),
        help="Metal to snapshot. Default: silver",
    )

    parser.add_argument(
        "--force",
        action="store_true",
        help="Save even before the configured close time",
    )

    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Replace a snapshot already stored for today",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def main() -> int:
    """Run the close-of-day job for one metal."""
    args = parse_args()

    logger = setup_logger(
        "save_daily_price",
        log_file=Config.LOGS_DIR / "save_daily_price.log",
        level="DEBUG" if args.verbose else "INFO",
    )

    try:
        Config.validate()
        service = MetalPriceService(args.metal)
        job = CloseOfDayJob(service, service.tracker.history)
        result = job.run(force=args.force, overwrite=args.overwrite)

        if result.saved:
            logger.info(
                "Saved %s close for %s: %.2f/gram (%s)",
                args.metal,
                result.record.date,
                result.record.price_per_gram,
                result.record.source,
            )
            return 0
        if result.skipped:
            logger.info("Nothing to do: %s", result.reason)
            return 0

        logger.error("Failed to save %s close: %s", args.metal, result.reason)
        return 1

    except Exception as e:
        logger.exception("Close-of-day job failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
