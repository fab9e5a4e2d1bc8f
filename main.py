"""Development server entrypoint.

Usage:
  python main.py -H 0.0.0.0 -p 3000 -c cache

Flags default to the HOST, PORT and CACHE_PATH environment variables
(.env included).
"""

from __future__ import annotations

import argparse
import os
from collections.abc import Sequence

from dotenv import load_dotenv

from inventory import create_app


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    # Imported late so the config classes see variables loaded from .env.
    from inventory.config import int_env

    parser = argparse.ArgumentParser(description="Inventory registry service")
    parser.add_argument("-H", "--host", default=os.getenv("HOST", "0.0.0.0"), help="Server host")
    parser.add_argument("-p", "--port", type=int, default=int_env("PORT", 3000), help="Server port")
    parser.add_argument("-c", "--cache", default=os.getenv("CACHE_PATH", "cache"), help="Cache directory")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    app = create_app({"HOST": args.host, "PORT": args.port, "CACHE_DIR": args.cache})
    app.run(host=args.host, port=args.port, debug=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
