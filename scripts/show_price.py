"""Print the current landed price with its 24h change and today's range.

Every run folds the fetched price into today's extremes record, so this can
also be scheduled as a lightweight poller.

Usage:
    python scripts/show_price.py
    python scripts/show_price.py --metal gold --json
    python scripts/show_price.py --country uae
    python scripts/show_price.py --ratio
    python scripts/show_price.py --health-check
"""

import argparse
import json
import sys

from src.pricing.calculator import METALS
from src.pricing.international import COUNTRIES
from src.pricing.price_service import MetalPriceService
from src.shared.config import Config
from src.shared.utils import setup_logger


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Show the current landed price, 24h change and daily range",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--metal",
        type=str,
        default="silver",
        choices=sorted(METALS),
        help="Metal to show. Default: silver",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the snapshot as JSON",
    )

    parser.add_argument(
        "--country",
        type=str,
        choices=sorted(COUNTRIES),
        help="Show the local price in a Gulf market instead",
    )

    parser.add_argument(
        "--ratio",
        action="store_true",
        help="Show the gold/silver ratio instead",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Check every upstream source and exit",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def run_health_checks(service: MetalPriceService, logger) -> bool:
    """Check each collector, skipping keyed providers without a key."""
    all_healthy = True
    for collector in (service.yahoo, service.frankfurter, service.metalprice, service.goldapi):
        if not getattr(collector, "enabled", True):
            logger.info("%s: skipped (no API key)", collector.SOURCE_NAME)
            continue
        is_healthy = collector.health_check()
        logger.info("%s: %s", collector.SOURCE_NAME, "PASSED" if is_healthy else "FAILED")
        all_healthy = all_healthy and is_healthy
    return all_healthy


def main() -> int:
    """Fetch and print one price snapshot."""
    args = parse_args()

    logger = setup_logger(
        "show_price",
        level="DEBUG" if args.verbose else "INFO",
    )

    try:
        Config.validate()
        service = MetalPriceService(args.metal)

        if args.health_check:
            return 0 if run_health_checks(service, logger) else 1

        if args.ratio:
            ratio = service.get_gold_silver_ratio()
            if ratio is None:
                logger.error("Gold/silver ratio unavailable")
                return 1
            if args.json:
                print(json.dumps(ratio.to_dict(), indent=2))
            else:
                print(f"Gold/silver ratio {ratio.ratio:.2f}: {ratio.interpretation_text}")
                print(f"  Gold   : INR {ratio.gold_price_per_gram:,.2f}/g (${ratio.gold_usd_oz:,.2f}/oz)")
                print(f"  Silver : INR {ratio.silver_price_per_gram:,.2f}/g (${ratio.silver_usd_oz:,.2f}/oz)")
            return 0

        if args.country:
            local = service.get_international_price(args.country)
            if local is None:
                logger.error("No %s price available for %s", args.metal, args.country)
                return 1
            if args.json:
                print(json.dumps(local.to_dict(), indent=2))
            else:
                print(f"{args.metal.title()} in {local.country} ({local.timestamp})")
                print(f"  Per gram : {local.currency} {local.price_per_gram:,.2f}")
                print(f"  Per 10 g : {local.currency} {local.price_per_10_gram:,.2f}")
                print(f"  Per kg   : {local.currency} {local.price_per_kg:,.2f}")
                print(f"  India    : INR {local.price_per_gram_inr:,.2f}/g")
            return 0

        snapshot = service.get_snapshot()
        if snapshot is None:
            logger.error("No %s price available", args.metal)
            return 1

        if args.json:
            print(json.dumps(snapshot.to_dict(), indent=2))
            return 0

        price, change, extremes = snapshot.price, snapshot.change, snapshot.extremes
        print(f"{args.metal.title()} ({price.source}, {price.timestamp})")
        print(f"  Per gram : INR {price.price_per_gram:,.2f}")
        print(f"  Per 10 g : INR {price.price_per_10_gram:,.2f}")
        print(f"  Per kg   : INR {price.price_per_kg:,.0f}")
        print(f"  Per tola : INR {price.price_per_tola:,.2f}")
        print(f"  Per sov. : INR {price.price_per_sovereign:,.2f}")
        if change.has_reference:
            print(
                f"  24h      : {change.change:+,.2f} ({change.change_percent:+.2f}%)"
                f" vs {change.reference_date}"
            )
        else:
            print("  24h      : no reference close yet")
        print(
            f"  Today    : open {extremes.open_price:,.2f}"
            f" / high {extremes.high:,.2f} / low {extremes.low:,.2f}"
        )
        return 0

    except Exception as e:
        logger.exception("Failed to show price: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
