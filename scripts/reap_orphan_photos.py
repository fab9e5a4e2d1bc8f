"""Delete photo files that no item references any more.

Orphans appear when an upload was stored but the record write (and its
cleanup) failed. Run while the service is idle: an upload in flight looks
like an orphan until its record is written.

Usage:
  python scripts/reap_orphan_photos.py [--dry-run]
"""

from __future__ import annotations

import argparse
import pathlib
import sys

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from inventory import create_app
from inventory.dependencies import get_item_service


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--dry-run", action="store_true", help="List orphans without deleting")
    parser.add_argument("-c", "--cache", default=None, help="Cache directory (default: CACHE_PATH)")
    args = parser.parse_args()

    overrides = {"CACHE_DIR": args.cache} if args.cache else None
    app = create_app(overrides)
    with app.app_context():
        keys = get_item_service().reap_orphan_photos(dry_run=args.dry_run)

    for key in keys:
        print(key)
    verb = "Found" if args.dry_run else "Removed"
    print(f"{verb} {len(keys)} orphaned photo(s).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
