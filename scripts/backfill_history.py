"""Seed the daily history from Yahoo Finance closes.

Yahoo daily closes are converted at today's USD/INR rate, so backfilled
entries are approximations (source "yahoo_backfill"). Dates already stored
are never replaced.

Usage:
    python scripts/backfill_history.py --days 90
    python scripts/backfill_history.py --metal gold --days 30 --export data/gold.csv
"""

import argparse
import sys
from pathlib import Path

from src.pricing.calculator import METALS, landed_price_per_gram
from src.pricing.price_service import MetalPriceService
from src.shared.config import Config
from src.shared.utils import iso_timestamp, now_utc, round2, setup_logger
from src.storage.schema import StoredDailyPrice


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Backfill the daily price history from Yahoo Finance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--metal",
        type=str,
        default="silver",
        choices=sorted(METALS),
        help="Metal to backfill. Default: silver",
    )

    parser.add_argument(
        "--days",
        type=int,
        default=30,
        help="Number of days to backfill. Default: 30",
        metavar="N",
    )

    parser.add_argument(
        "--export",
        type=Path,
        help="Also export the resulting history to this CSV file",
        metavar="PATH",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def main() -> int:
    """Backfill missing dates for one metal."""
    args = parse_args()

    logger = setup_logger(
        "backfill_history",
        level="DEBUG" if args.verbose else "INFO",
    )

    if args.days <= 0:
        logger.error("--days must be positive")
        return 1

    try:
        Config.validate()
        service = MetalPriceService(args.metal)
        history = service.tracker.history

        closes = service.yahoo.fetch_history(service.metal.yahoo_symbol, args.days)
        rate = service.frankfurter.fetch_rate("USD", "INR")
        if closes.empty or rate is None:
            logger.error("Yahoo history or USD/INR rate unavailable")
            return 1

        timestamp = iso_timestamp(now_utc())
        added = 0
        for row in closes.itertuples(index=False):
            if history.is_date_stored(row.date):
                continue
            per_gram = landed_price_per_gram(row.close, rate)
            history.save_daily_price(
                StoredDailyPrice(
                    date=row.date,
                    price_per_gram=round2(per_gram),
                    price_per_kg=float(round(per_gram * 1000)),
                    spot_usd_oz=round2(row.close),
                    usd_inr_rate=round2(rate),
                    source="yahoo_backfill",
                    timestamp=timestamp,
                )
            )
            added += 1

        logger.info("Backfilled %d of %d days (%d stored in total)", added, len(closes), history.count())

        if args.export:
            history.export_csv(args.export)

        return 0

    except Exception as e:
        logger.exception("Backfill failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
