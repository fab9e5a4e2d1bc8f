"""Create the items table in the configured database.

Reads DATABASE_URL (or PG* variables) from .env / environment.

Usage:
  python scripts/create_tables.py
"""

from __future__ import annotations

import os
import pathlib
import sys

from dotenv import load_dotenv

PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from inventory.config import resolve_database_url
from inventory.db import create_app_engine, wait_for_database
from inventory.models.base import Base

# Import models so they register with Base.metadata
from inventory import models  # noqa: F401


def main() -> int:
    """Create all ORM tables in the target database."""

    load_dotenv()
    env_local = PROJECT_ROOT / ".env.local"
    if env_local.exists():
        load_dotenv(dotenv_path=env_local, override=True)

    engine = create_app_engine(resolve_database_url())
    if not wait_for_database(engine, retries=int(os.getenv("DB_CONNECT_RETRIES", "5"))):
        print("Database unreachable.", file=sys.stderr)
        return 1

    Base.metadata.create_all(bind=engine)
    print("Tables created (or already exist).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
