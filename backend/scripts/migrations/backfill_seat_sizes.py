#!/usr/bin/env python3
"""
Script: backfill_seat_sizes.py
Purpose: Fill orders.seat_sizes for orders created before seat sizes were
stored as data

Sizes come from the "Seat Size" option item when the order has one, and
otherwise from special_notes / special_instructions ("Seat size 17.5",
"17,5 seat", "18 inch", "stamped 17").

Usage:
    cd backend && source venv/bin/activate
    python scripts/migrations/backfill_seat_sizes.py [--apply] [--limit N]

Options:
    --apply      Write the extracted sizes (default is a dry run)
    --limit N    Only look at the first N orders
"""

import sys
import argparse
import logging
from pathlib import Path

# Add backend to path
BACKEND_DIR = Path(__file__).parent.parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from dotenv import load_dotenv

# Load environment
env_path = BACKEND_DIR / '.env.development'
if env_path.exists():
    load_dotenv(env_path)
else:
    load_dotenv(BACKEND_DIR / '.env')

from app.repositories.order_repository import OrderRepository
from app.services.seat_size_service import seat_size_extractor

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logger = logging.getLogger("backfill_seat_sizes")


def print_header(title: str):
    """Print formatted header"""
    print(f"\n{'='*60}")
    print(f"  {title}")
    print(f"{'='*60}\n")


def extract_all(rows: list) -> dict:
    """order id -> seat sizes, for the rows where something was found"""
    found = {}
    for row in rows:
        sizes = seat_size_extractor.extract(
            row.get('option_items'),
            row.get('special_notes'),
            row.get('special_instructions'),
        )
        if sizes:
            found[row['id']] = sizes
    return found


def main():
    parser = argparse.ArgumentParser(description="Backfill orders.seat_sizes")
    parser.add_argument("--apply", action="store_true", help="Write the results")
    parser.add_argument("--limit", type=int, default=None, help="Only process N orders")
    args = parser.parse_args()

    repo = OrderRepository()

    print_header("Seat size backfill" + ("" if args.apply else " (DRY RUN)"))

    rows = repo.find_missing_seat_sizes(limit=args.limit)
    print(f"Orders without seat sizes: {len(rows)}")

    found = extract_all(rows)
    numbers = {row['id']: row.get('order_number') for row in rows}

    for order_id, sizes in list(found.items())[:20]:
        print(f"  {numbers.get(order_id) or order_id}: {', '.join(sizes)}")
    if len(found) > 20:
        print(f"  ... and {len(found) - 20} more")

    print(f"\nSizes found:     {len(found)}")
    print(f"Nothing found:   {len(rows) - len(found)}")

    if not args.apply:
        print("\nDry run, nothing written. Re-run with --apply to save.")
        return 0

    try:
        updated = repo.set_seat_sizes(found)
    except Exception as e:
        logger.error(f"Backfill failed, nothing written: {e}")
        return 1

    print(f"\n✅ Updated {updated} orders")
    return 0


if __name__ == "__main__":
    sys.exit(main())
